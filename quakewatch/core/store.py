"""Quake store - In-memory session state.

QuakeStore owns the latest snapshot, the user's criteria, the selection
and the refresh status, and keeps the derived view in sync with them.
All mutation goes through the named operations below. The store does no
I/O and no locking; its owner (RefreshScheduler) serialises access.
"""

from datetime import datetime, timezone
from typing import Any, Callable

from quakewatch.core.criteria import QueryCriteria, affects_view, requires_refetch
from quakewatch.core.earthquake import Event
from quakewatch.core.state import FetchResult, RefreshState, Snapshot
from quakewatch.core.view import derive_view


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuakeStore:
    """Snapshot, criteria, selection and derived view for one session."""

    def __init__(
        self,
        criteria: QueryCriteria | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize an empty store.

        Args:
            criteria: Initial criteria (defaults if not provided)
            clock: Returns the current UTC time
        """
        self._clock = clock
        self._criteria = criteria or QueryCriteria()
        self._snapshot = Snapshot()
        self._refresh_state = RefreshState.idle()
        self._selected_id: str | None = None
        self._view: tuple[Event, ...] = ()
        self._criteria_version = 0

    @property
    def criteria(self) -> QueryCriteria:
        return self._criteria

    @property
    def criteria_version(self) -> int:
        """Incremented whenever a query-affecting criteria field changes."""
        return self._criteria_version

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def events(self) -> tuple[Event, ...]:
        return self._snapshot.events

    @property
    def refresh_state(self) -> RefreshState:
        return self._refresh_state

    @property
    def is_loading(self) -> bool:
        return self._refresh_state.is_in_flight

    @property
    def error(self) -> str | None:
        """Failure reason of the last refresh, if it failed."""
        return self._refresh_state.reason if self._refresh_state.is_failed else None

    @property
    def last_updated(self) -> datetime | None:
        """When the current snapshot was fetched."""
        return self._snapshot.fetched_at

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected_event(self) -> Event | None:
        if self._selected_id is None:
            return None
        return self._snapshot.find(self._selected_id)

    def derived_view(self) -> tuple[Event, ...]:
        """Filtered and sorted events for display.

        Returns the cached projection; it is recomputed only when the
        snapshot or the view-affecting criteria change.
        """
        return self._view

    def begin_refresh(self) -> None:
        """Mark a fetch as in flight. Snapshot and view are untouched."""
        self._refresh_state = RefreshState.in_flight()

    def apply_fetch_result(self, result: FetchResult) -> None:
        """Apply the outcome of a completed fetch.

        On success the snapshot is replaced wholesale, a selection that
        is no longer present is cleared and the view is recomputed. On
        failure only the refresh state changes, so the previous data
        stays visible.
        """
        now = self._clock()

        if not result.success:
            self._refresh_state = RefreshState.failed(result.error.message, now)
            return

        self._snapshot = Snapshot(events=tuple(result.events), fetched_at=now)
        self._refresh_state = RefreshState.succeeded(now)

        if self._selected_id is not None and self._selected_id not in self._snapshot.event_ids:
            self._selected_id = None

        self._recompute_view()

    def set_criteria(self, **changes: Any) -> bool:
        """Merge changed criteria fields.

        View-only changes (search term, sort field, sort direction)
        recompute the view immediately.

        Returns:
            True if the change affects the feed query and a new fetch
            is required

        Raises:
            ValueError: On unknown fields or invalid values; the store
                is left unchanged
        """
        new = self._criteria.with_changes(**changes)
        old = self._criteria
        self._criteria = new

        if affects_view(old, new):
            self._recompute_view()

        if requires_refetch(old, new):
            self._criteria_version += 1
            return True
        return False

    def select(self, event_id: str | None) -> None:
        """Toggle selection. Selecting the selected event clears it.

        Ids that are not in the current snapshot are ignored.
        """
        if event_id is None or event_id == self._selected_id:
            self._selected_id = None
        elif self._snapshot.find(event_id) is not None:
            self._selected_id = event_id

    def _recompute_view(self) -> None:
        self._view = derive_view(self._snapshot.events, self._criteria)
