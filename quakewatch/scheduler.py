"""Refresh Scheduler - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the I/O-performing shell components. It's the "glue" that
makes the application work:

    timer / manual / criteria change
        -> FeedClient.fetch (worker thread)
        -> QuakeStore.apply_fetch_result (derived view recomputed)
        -> AlertDetector.check on the raw events
        -> AlertSink.notify for newly significant events

RefreshScheduler is the single owner of the store and the detector. Every
mutation happens under one lock; feed I/O, sink calls and listener
callbacks happen outside it.

At most one fetch is in flight. A refresh requested while a fetch is in
flight is coalesced into a single follow-up fetch that starts as soon as
the current one completes, no matter how many requests arrived. A result
is only applied if it belongs to the most recently started fetch and was
built from the current query criteria; anything else is discarded.
"""

import functools
import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from quakewatch.core.alerts import AlertDetector
from quakewatch.core.config import Config
from quakewatch.core.criteria import QueryCriteria
from quakewatch.core.earthquake import Event
from quakewatch.core.state import FetchResult, RefreshState
from quakewatch.core.store import QuakeStore
from quakewatch.core.time_window import TimeWindow, compute_time_window
from quakewatch.shell.alert_sink import AlertSink, create_alert_sink
from quakewatch.shell.feed_client import FeedClient
from quakewatch.timer import PeriodicTimer


logger = logging.getLogger(__name__)


# Why a refresh was requested
STARTUP = "startup"
MANUAL = "manual"
TIMER = "timer"
CRITERIA = "criteria"
RETRY = "retry"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class FetchTicket:
    """Everything needed to run, and later validate, one fetch.

    Attributes:
        generation: Increments with every fetch started
        criteria_version: Store criteria version the query was built from
        reason: Why the fetch was requested
        criteria: Criteria snapshot sent to the feed
        window: Absolute time window sent to the feed
    """
    generation: int
    criteria_version: int
    reason: str
    criteria: QueryCriteria
    window: TimeWindow


class RefreshScheduler:
    """Drives refresh cycles and exposes the session state.

    This is the entire surface a presentation layer needs:
    ``derived_view()``, ``refresh_state``, ``criteria``,
    ``selected_event``, ``select()``, ``set_criteria()`` and
    ``manual_refresh()``, plus ``add_listener()`` for change callbacks.
    """

    def __init__(
        self,
        feed_client: FeedClient,
        config: Config | None = None,
        store: QuakeStore | None = None,
        detector: AlertDetector | None = None,
        alert_sink: AlertSink | None = None,
        executor: Executor | None = None,
        clock: Callable[[], datetime] = _utc_now,
        timer_factory: Callable[..., Any] = PeriodicTimer,
        retry_timer_factory: Callable[..., Any] = threading.Timer,
    ) -> None:
        """Initialize scheduler.

        Args:
            feed_client: Feed client used for every fetch
            config: Application configuration (defaults if not provided)
            store: Session store (created from config if not provided)
            detector: Alert detector (created from config if not provided)
            alert_sink: Alert sink (created from config if not provided)
            executor: Runs fetches off the caller's thread
            clock: Returns the current UTC time
            timer_factory: Builds the periodic timer ``(interval, callback)``
            retry_timer_factory: Builds one-shot retry timers ``(delay, callback)``
        """
        self.config = config or Config()
        self.feed_client = feed_client
        self.store = store or QuakeStore(self.config.default_criteria, clock=clock)
        self.detector = detector or AlertDetector(
            threshold=self.config.alert_threshold,
            alert_on_first_fetch=self.config.alert_on_first_fetch,
        )
        self.alert_sink = alert_sink or create_alert_sink(self.config.slack_webhook_url)
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="quakewatch-fetch",
        )
        self._clock = clock
        self._timer_factory = timer_factory
        self._retry_timer_factory = retry_timer_factory

        self._lock = threading.Lock()
        self._generation = 0
        self._in_flight: FetchTicket | None = None
        self._pending_reason: str | None = None
        self._consecutive_failures = 0
        self._timer: Any = None
        self._retry_timer: Any = None
        self._retry_seq = 0
        self._started = False
        self._stopped = False
        self._listeners: list[Callable[["RefreshScheduler"], None]] = []

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> "RefreshScheduler":
        """Build a scheduler with a FeedClient configured from ``config``."""
        feed_client = FeedClient(
            base_url=config.feed_url,
            timeout=config.request_timeout_seconds,
        )
        return cls(feed_client, config=config, **kwargs)

    # Presentation surface

    def derived_view(self) -> tuple[Event, ...]:
        with self._lock:
            return self.store.derived_view()

    @property
    def refresh_state(self) -> RefreshState:
        with self._lock:
            return self.store.refresh_state

    @property
    def criteria(self) -> QueryCriteria:
        with self._lock:
            return self.store.criteria

    @property
    def selected_event(self) -> Event | None:
        with self._lock:
            return self.store.selected_event

    @property
    def last_updated(self) -> datetime | None:
        with self._lock:
            return self.store.last_updated

    @property
    def is_stopped(self) -> bool:
        with self._lock:
            return self._stopped

    def select(self, event_id: str | None) -> None:
        """Toggle the selected event."""
        with self._lock:
            self.store.select(event_id)
        self._notify_listeners()

    def set_criteria(self, **changes: Any) -> bool:
        """Change criteria; refetch if the feed query is affected.

        Returns:
            True if a refresh was requested

        Raises:
            ValueError: On unknown fields or invalid values
        """
        with self._lock:
            needs_fetch = self.store.set_criteria(**changes)
        self._notify_listeners()

        if needs_fetch:
            self.request_refresh(CRITERIA)
        return needs_fetch

    def manual_refresh(self) -> bool:
        return self.request_refresh(MANUAL)

    def add_listener(self, callback: Callable[["RefreshScheduler"], None]) -> None:
        """Register a callback invoked after every state change."""
        with self._lock:
            self._listeners.append(callback)

    # Lifecycle

    def start(self) -> None:
        """Run the startup fetch and start the periodic timer."""
        with self._lock:
            if self._started or self._stopped:
                return
            self._started = True
            timer = self._timer = self._timer_factory(
                self.config.refresh_interval_seconds,
                self._on_timer,
            )

        logger.info(
            "Starting refresh scheduler (every %ss)",
            self.config.refresh_interval_seconds,
        )
        timer.start()
        self.request_refresh(STARTUP)

    def stop(self) -> None:
        """Tear down the session.

        Stops the periodic timer and any pending retry, abandons an
        outstanding fetch and guarantees no state mutation afterwards.
        """
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._pending_reason = None
            self._in_flight = None
            timer, self._timer = self._timer, None
            retry_timer, self._retry_timer = self._retry_timer, None

        logger.info("Stopping refresh scheduler")

        if timer is not None:
            timer.cancel()
        if retry_timer is not None:
            retry_timer.cancel()
        self._executor.shutdown(wait=False, cancel_futures=True)

    # Refresh cycle

    def request_refresh(self, reason: str = MANUAL) -> bool:
        """Request a refresh.

        Args:
            reason: Why the refresh is requested

        Returns:
            True if a fetch started now, False if it was coalesced into
            the pending follow-up or the scheduler is stopped
        """
        with self._lock:
            if self._stopped:
                logger.debug("Ignoring %s refresh after stop", reason)
                return False

            if self._in_flight is not None:
                self._pending_reason = self._pending_reason or reason
                logger.debug(
                    "Fetch in flight, coalescing %s refresh into pending %s refresh",
                    reason,
                    self._pending_reason,
                )
                return False

            ticket = self._begin_fetch_locked(reason)

        self._notify_listeners()
        self._submit(ticket)
        return True

    def _begin_fetch_locked(self, reason: str) -> FetchTicket:
        self._generation += 1
        criteria = self.store.criteria
        ticket = FetchTicket(
            generation=self._generation,
            criteria_version=self.store.criteria_version,
            reason=reason,
            criteria=criteria,
            window=compute_time_window(criteria.time_range, self._clock()),
        )
        self._in_flight = ticket
        self.store.begin_refresh()
        logger.info(
            "Starting %s fetch #%d (%s, M%.1f+)",
            reason,
            ticket.generation,
            criteria.time_range,
            criteria.min_magnitude,
        )
        return ticket

    def _submit(self, ticket: FetchTicket) -> None:
        try:
            self._executor.submit(self._run_fetch, ticket)
        except RuntimeError:
            # Executor already shut down by stop()
            logger.debug("Fetch #%d not submitted, scheduler stopped", ticket.generation)

    def _run_fetch(self, ticket: FetchTicket) -> None:
        try:
            result = self.feed_client.fetch(ticket.criteria, self.config.region, ticket.window)
        except Exception as e:
            logger.exception("Unexpected error fetching earthquakes")
            result = FetchResult.failure(f"Failed to fetch earthquakes: {e}")

        self._complete(ticket, result)

    def _complete(self, ticket: FetchTicket, result: FetchResult) -> None:
        alerts: list[Event] = []
        next_ticket: FetchTicket | None = None
        stale_retry: Any = None

        with self._lock:
            if self._stopped or self._in_flight is None or ticket.generation != self._generation:
                logger.debug("Discarding result of abandoned fetch #%d", ticket.generation)
                return

            self._in_flight = None
            next_reason, self._pending_reason = self._pending_reason, None

            if ticket.criteria_version != self.store.criteria_version:
                logger.info("Discarding result of fetch #%d, criteria changed", ticket.generation)
                next_reason = next_reason or CRITERIA
            else:
                self.store.apply_fetch_result(result)

                if result.success:
                    self._consecutive_failures = 0
                    stale_retry, self._retry_timer = self._retry_timer, None
                    self._retry_seq += 1
                    alerts = self.detector.check(result.events)
                    logger.info(
                        "Fetch #%d succeeded: %d events, %d shown, %d new alerts",
                        ticket.generation,
                        len(result.events),
                        len(self.store.derived_view()),
                        len(alerts),
                    )
                else:
                    self._consecutive_failures += 1
                    logger.warning(
                        "Fetch #%d failed (%d in a row): %s",
                        ticket.generation,
                        self._consecutive_failures,
                        result.error.message,
                    )
                    if next_reason is None:
                        stale_retry = self._schedule_retry_locked()

            if next_reason is not None:
                next_ticket = self._begin_fetch_locked(next_reason)

        if stale_retry is not None:
            stale_retry.cancel()

        self._dispatch_alerts(alerts)
        self._notify_listeners()

        if next_ticket is not None:
            self._submit(next_ticket)

    def _schedule_retry_locked(self) -> Any:
        """Arm the backoff retry; returns a superseded timer to cancel."""
        delays = self.config.retry_delays_seconds
        previous, self._retry_timer = self._retry_timer, None
        if not delays:
            return previous

        delay = delays[min(self._consecutive_failures, len(delays)) - 1]
        self._retry_seq += 1
        timer = self._retry_timer_factory(delay, functools.partial(self._on_retry, self._retry_seq))
        if hasattr(timer, "daemon"):
            timer.daemon = True
        timer.start()
        self._retry_timer = timer
        logger.info("Retrying in %ss", delay)
        return previous

    def _on_timer(self) -> None:
        self.request_refresh(TIMER)

    def _on_retry(self, seq: int) -> None:
        with self._lock:
            if seq != self._retry_seq:
                logger.debug("Ignoring superseded retry #%d", seq)
                return
            self._retry_timer = None
        self.request_refresh(RETRY)

    def _dispatch_alerts(self, events: list[Event]) -> None:
        for event in events:
            logger.info("Alerting on M%.1f %s (%s)", event.sort_magnitude, event.place, event.id)
            try:
                self.alert_sink.notify(event)
            except Exception:
                logger.exception("Alert sink failed for %s", event.id)

    def _notify_listeners(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("State listener failed")
