"""Alert detection - Session-scoped deduplication state.

AlertDetector remembers which significant events the session has already
seen, so an event alerts at most once no matter how often it is
re-fetched. Detection always runs on the raw fetched events, never on the
filtered view, so display filters cannot suppress or repeat an alert.
"""

from typing import Iterable

from quakewatch.core.dedup import (
    DEFAULT_ALERT_THRESHOLD,
    filter_significant,
    find_new_significant,
    get_event_ids,
)
from quakewatch.core.earthquake import Event


class AlertDetector:
    """Decides which events in a fetch warrant a new alert.

    The first successful check establishes a baseline: significant events
    that already exist when the session starts are recorded without
    alerting. Every later check alerts on each significant event not seen
    before. The alerted set only grows for the lifetime of the session.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_ALERT_THRESHOLD,
        alert_on_first_fetch: bool = False,
    ) -> None:
        """Initialize detector.

        Args:
            threshold: Minimum magnitude that alerts
            alert_on_first_fetch: Alert on the first check instead of
                using it as a silent baseline
        """
        self.threshold = threshold
        self.alert_on_first_fetch = alert_on_first_fetch
        self._alerted_ids: set[str] = set()
        self._has_baseline = False

    @property
    def alerted_ids(self) -> frozenset[str]:
        return frozenset(self._alerted_ids)

    @property
    def has_baseline(self) -> bool:
        return self._has_baseline

    def check(self, events: Iterable[Event]) -> list[Event]:
        """Record a successful fetch and return events to alert on.

        Args:
            events: Raw events from the fetch

        Returns:
            Newly significant events, in feed order
        """
        events = list(events)
        quiet = not self._has_baseline and not self.alert_on_first_fetch
        self._has_baseline = True

        if quiet:
            self._alerted_ids |= get_event_ids(filter_significant(events, self.threshold))
            return []

        new_events = find_new_significant(events, self._alerted_ids, self.threshold)
        self._alerted_ids |= get_event_ids(new_events)
        return new_events
