"""Derived view - Pure functions.

Filters and sorts the raw snapshot for display. The view is a pure
function of (events, criteria): same inputs, same output.
"""

from typing import Callable, Iterable

from quakewatch.core.criteria import QueryCriteria
from quakewatch.core.earthquake import Event


SORT_KEYS: dict[str, Callable[[Event], float]] = {
    "time": lambda e: e.time.timestamp(),
    "magnitude": lambda e: e.sort_magnitude,
    "depth": lambda e: e.sort_depth,
}


def filter_by_search_term(events: Iterable[Event], search_term: str) -> list[Event]:
    """Keep events whose place contains the search term.

    Pure function. Matching is case-insensitive on the trimmed term.
    An empty term keeps everything; events without a place never match a
    non-empty term.

    Args:
        events: Events to filter
        search_term: Free-text term

    Returns:
        Matching events in their original order
    """
    term = search_term.strip().casefold()
    if not term:
        return list(events)

    return [
        e for e in events
        if e.place is not None and term in e.place.casefold()
    ]


def sort_events(
    events: Iterable[Event],
    sort_field: str = "time",
    sort_direction: str = "descending",
) -> list[Event]:
    """Sort events by field and direction.

    Pure function. The sort is stable in both directions: events with
    equal keys keep their input order. Absent magnitude/depth sort as 0.

    Args:
        events: Events to sort
        sort_field: time, magnitude or depth (unknown falls back to time)
        sort_direction: ascending or descending

    Returns:
        New sorted list
    """
    key = SORT_KEYS.get(sort_field, SORT_KEYS["time"])
    # reverse=True keeps equal elements in original order
    return sorted(events, key=key, reverse=sort_direction == "descending")


def derive_view(events: Iterable[Event], criteria: QueryCriteria) -> tuple[Event, ...]:
    """Compute the filtered and sorted view of a snapshot.

    Pure function. ``min_magnitude`` is not re-applied here; the feed
    query already bounds it.
    """
    filtered = filter_by_search_term(events, criteria.search_term)
    return tuple(sort_events(filtered, criteria.sort_field, criteria.sort_direction))
