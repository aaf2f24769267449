"""Deduplication logic - Pure functions.

This module handles logic for determining which events are significant
and which of those have already been alerted on. All functions are pure
with no side effects.

Note: The session's set of alerted IDs is held by AlertDetector
(core/alerts.py). This module only contains the pure logic.
"""

from typing import Iterable

from quakewatch.core.earthquake import Event


# Magnitude at or above which an event is "significant"
DEFAULT_ALERT_THRESHOLD = 5.5


def get_event_ids(events: Iterable[Event]) -> set[str]:
    """Extract IDs from a list of events.

    Pure function.
    """
    return {e.id for e in events}


def is_significant(event: Event, threshold: float = DEFAULT_ALERT_THRESHOLD) -> bool:
    """Check if an event meets the alert threshold.

    Pure function. An absent magnitude counts as 0 and never qualifies
    for a positive threshold.
    """
    return event.sort_magnitude >= threshold


def filter_significant(
    events: Iterable[Event],
    threshold: float = DEFAULT_ALERT_THRESHOLD,
) -> list[Event]:
    """Keep events at or above the threshold, preserving order.

    Pure function.
    """
    return [e for e in events if is_significant(e, threshold)]


def filter_already_alerted(
    events: Iterable[Event],
    already_alerted_ids: set[str],
) -> list[Event]:
    """Filter out events that have already been alerted.

    Pure function.

    Args:
        events: Events to filter
        already_alerted_ids: IDs that have already been alerted

    Returns:
        Events that haven't been alerted yet, first occurrence only
    """
    seen = set(already_alerted_ids)
    result = []
    for event in events:
        if event.id in seen:
            continue
        seen.add(event.id)
        result.append(event)
    return result


def find_new_significant(
    events: Iterable[Event],
    already_alerted_ids: set[str],
    threshold: float = DEFAULT_ALERT_THRESHOLD,
) -> list[Event]:
    """Significant events not yet alerted on.

    Pure function.

    Args:
        events: Raw fetched events
        already_alerted_ids: IDs already alerted this session
        threshold: Minimum magnitude

    Returns:
        Events that should alert now, in input order
    """
    return filter_already_alerted(filter_significant(events, threshold), already_alerted_ids)
