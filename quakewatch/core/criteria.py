"""Query criteria - Pure data structures.

QueryCriteria holds the user-controlled settings. Some of them shape the
feed query (time range, minimum magnitude); the rest only affect how the
fetched events are filtered and sorted locally.
"""

from dataclasses import dataclass, fields, replace
from typing import Any

from quakewatch.core.time_window import TIME_RANGE_DAYS


TIME_RANGES = tuple(TIME_RANGE_DAYS)
SORT_FIELDS = ("time", "magnitude", "depth")
SORT_DIRECTIONS = ("ascending", "descending")

# Fields that change the server query and therefore need a new fetch
QUERY_FIELDS = frozenset({"time_range", "min_magnitude"})

# Fields that only change the derived view
VIEW_FIELDS = frozenset({"search_term", "sort_field", "sort_direction"})


@dataclass(frozen=True)
class QueryCriteria:
    """User-controlled filter and sort settings.

    Attributes:
        time_range: How far back to query (hour/day/week/month/year)
        min_magnitude: Minimum magnitude sent to the feed
        search_term: Free-text place filter, applied client-side
        sort_field: time, magnitude or depth
        sort_direction: ascending or descending
    """
    time_range: str = "week"
    min_magnitude: float = 0.0
    search_term: str = ""
    sort_field: str = "time"
    sort_direction: str = "descending"

    def __post_init__(self) -> None:
        errors = validate_criteria(self)
        if errors:
            raise ValueError("; ".join(errors))

    def with_changes(self, **changes: Any) -> "QueryCriteria":
        """Return a copy with the given fields replaced.

        Raises:
            ValueError: On unknown field names or invalid values
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ValueError(f"Unknown criteria field(s): {', '.join(unknown)}")
        if "min_magnitude" in changes:
            changes["min_magnitude"] = float(changes["min_magnitude"])
        return replace(self, **changes)


def validate_criteria(criteria: QueryCriteria) -> list[str]:
    """Validate criteria values.

    Pure function.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    if criteria.time_range not in TIME_RANGES:
        errors.append(
            f"time_range must be one of {', '.join(TIME_RANGES)}, got {criteria.time_range!r}"
        )

    if criteria.min_magnitude < 0:
        errors.append(f"min_magnitude must be >= 0, got {criteria.min_magnitude}")

    if criteria.sort_field not in SORT_FIELDS:
        errors.append(
            f"sort_field must be one of {', '.join(SORT_FIELDS)}, got {criteria.sort_field!r}"
        )

    if criteria.sort_direction not in SORT_DIRECTIONS:
        errors.append(
            f"sort_direction must be one of {', '.join(SORT_DIRECTIONS)}, "
            f"got {criteria.sort_direction!r}"
        )

    if not isinstance(criteria.search_term, str):
        errors.append("search_term must be a string")

    return errors


def changed_fields(old: QueryCriteria, new: QueryCriteria) -> set[str]:
    """Return the names of fields whose values differ.

    Pure function.
    """
    return {
        f.name for f in fields(old)
        if getattr(old, f.name) != getattr(new, f.name)
    }


def requires_refetch(old: QueryCriteria, new: QueryCriteria) -> bool:
    """Check whether moving from ``old`` to ``new`` changes the feed query.

    Pure function.
    """
    return bool(changed_fields(old, new) & QUERY_FIELDS)


def affects_view(old: QueryCriteria, new: QueryCriteria) -> bool:
    """Check whether moving from ``old`` to ``new`` changes the derived view.

    Pure function.
    """
    return bool(changed_fields(old, new) & VIEW_FIELDS)
