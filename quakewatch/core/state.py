"""Refresh state and snapshot models - Pure data structures."""

from dataclasses import dataclass, field
from datetime import datetime

from quakewatch.core.earthquake import Event


IDLE = "idle"
IN_FLIGHT = "in_flight"
SUCCEEDED = "succeeded"
FAILED = "failed"


@dataclass(frozen=True)
class RefreshState:
    """Status of the most recent refresh cycle.

    Attributes:
        status: idle, in_flight, succeeded or failed
        at: When the last fetch completed (succeeded/failed only)
        reason: Human-readable failure reason (failed only)
    """
    status: str = IDLE
    at: datetime | None = None
    reason: str | None = None

    @classmethod
    def idle(cls) -> "RefreshState":
        return cls(status=IDLE)

    @classmethod
    def in_flight(cls) -> "RefreshState":
        return cls(status=IN_FLIGHT)

    @classmethod
    def succeeded(cls, at: datetime) -> "RefreshState":
        return cls(status=SUCCEEDED, at=at)

    @classmethod
    def failed(cls, reason: str, at: datetime) -> "RefreshState":
        return cls(status=FAILED, at=at, reason=reason)

    @property
    def is_in_flight(self) -> bool:
        return self.status == IN_FLIGHT

    @property
    def is_failed(self) -> bool:
        return self.status == FAILED


@dataclass(frozen=True)
class FetchError:
    """A failed feed query (transport, timeout, HTTP status or decode).

    Attributes:
        message: Human-readable description
    """
    message: str


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one feed query: either events or an error.

    Attributes:
        events: Parsed events in feed order (empty on failure)
        error: Set when the fetch failed
    """
    events: tuple[Event, ...] = field(default_factory=tuple)
    error: FetchError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, events: list[Event] | tuple[Event, ...]) -> "FetchResult":
        return cls(events=tuple(events))

    @classmethod
    def failure(cls, message: str) -> "FetchResult":
        return cls(error=FetchError(message=message))


@dataclass(frozen=True)
class Snapshot:
    """Raw result set of the most recent successful fetch.

    Attributes:
        events: Events in feed order
        fetched_at: When the fetch completed, None before the first one
    """
    events: tuple[Event, ...] = field(default_factory=tuple)
    fetched_at: datetime | None = None

    @property
    def event_ids(self) -> set[str]:
        return {e.id for e in self.events}

    def find(self, event_id: str) -> Event | None:
        """Return the event with the given id, if present."""
        for event in self.events:
            if event.id == event_id:
                return event
        return None
