"""Functional Core - Pure functions with no side effects.

This module contains the business logic as pure functions and plain
state objects:
- Event data parsing
- Time window calculation
- Criteria, filtering and sorting
- Session store and alert detection
- Message formatting

Nothing here performs I/O.
"""

from quakewatch.core.earthquake import Event, parse_events
from quakewatch.core.geo import RegionBounds, WESTERN_CANADA
from quakewatch.core.time_window import TimeWindow, compute_time_window
from quakewatch.core.criteria import QueryCriteria
from quakewatch.core.view import derive_view, filter_by_search_term, sort_events
from quakewatch.core.state import FetchError, FetchResult, RefreshState, Snapshot
from quakewatch.core.store import QuakeStore
from quakewatch.core.alerts import AlertDetector
from quakewatch.core.formatter import format_notification

__all__ = [
    # Events
    "Event",
    "parse_events",
    # Geo
    "RegionBounds",
    "WESTERN_CANADA",
    # Time window
    "TimeWindow",
    "compute_time_window",
    # Criteria and view
    "QueryCriteria",
    "derive_view",
    "filter_by_search_term",
    "sort_events",
    # State
    "FetchError",
    "FetchResult",
    "RefreshState",
    "Snapshot",
    "QuakeStore",
    # Alerts
    "AlertDetector",
    "format_notification",
]
