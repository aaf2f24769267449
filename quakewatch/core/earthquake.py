"""Earthquake data models and parsing - Pure functions.

This module handles parsing USGS GeoJSON data into typed Event objects.
All functions are pure with no side effects.

Optional feed fields (magnitude, place, depth, felt reports, url) are kept
as None on the model so the display layer can tell "absent" from zero.
Every numeric comparison goes through the ``sort_*`` properties, which
treat absent values as 0.0.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True, eq=False)
class Event:
    """Immutable earthquake event.

    Equality and hashing use ``id`` only.

    Attributes:
        id: Unique USGS event ID
        magnitude: Event magnitude, None if the feed omitted it
        place: Human-readable location description, None if absent
        time: Event timestamp (UTC)
        latitude: Epicenter latitude
        longitude: Epicenter longitude
        depth_km: Depth in kilometers, None if absent from coordinates
        felt: Number of "felt" reports, None if absent
        url: USGS event detail URL, None if absent
    """
    id: str
    magnitude: float | None
    place: str | None
    time: datetime
    latitude: float
    longitude: float
    depth_km: float | None = None
    felt: int | None = None
    url: str | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def sort_magnitude(self) -> float:
        """Magnitude for comparisons (absent counts as 0.0)."""
        return self.magnitude if self.magnitude is not None else 0.0

    @property
    def sort_depth(self) -> float:
        """Depth for comparisons (absent counts as 0.0)."""
        return self.depth_km if self.depth_km is not None else 0.0

    @property
    def time_ms(self) -> int:
        """Event time as milliseconds since epoch."""
        return int(self.time.timestamp() * 1000)

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    return float(value)


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


def _optional_str(value: Any) -> str | None:
    # Non-string values are treated as absent
    return value if isinstance(value, str) else None


def parse_event(feature: dict[str, Any]) -> Event | None:
    """Parse a single GeoJSON feature into an Event.

    Pure function: takes raw dict, returns typed Event or None if the
    feature lacks an id, a time, or a longitude/latitude pair.

    Args:
        feature: GeoJSON feature dict from USGS API

    Returns:
        Event object or None if parsing fails
    """
    try:
        event_id = feature.get("id")
        if not event_id:
            return None

        props = feature.get("properties") or {}
        geometry = feature.get("geometry") or {}
        coords = geometry.get("coordinates") or []

        if len(coords) < 2:
            return None

        # USGS uses milliseconds since epoch
        time_ms = props.get("time")
        if time_ms is None:
            return None

        depth = coords[2] if len(coords) > 2 else None

        return Event(
            id=str(event_id),
            magnitude=_optional_float(props.get("mag")),
            place=_optional_str(props.get("place")),
            time=datetime.fromtimestamp(time_ms / 1000, tz=timezone.utc),
            longitude=float(coords[0]),
            latitude=float(coords[1]),
            depth_km=_optional_float(depth),
            felt=_optional_int(props.get("felt")),
            url=_optional_str(props.get("url")),
        )
    except (AttributeError, TypeError, ValueError, OverflowError):
        return None


def parse_events(geojson: dict[str, Any]) -> list[Event]:
    """Parse USGS GeoJSON response into a list of Events.

    Pure function: skips invalid features and keeps feed order. Callers
    must not rely on the feed's ordering for display.

    Args:
        geojson: Full GeoJSON FeatureCollection from USGS API

    Returns:
        List of valid Event objects in feed order
    """
    features = geojson.get("features") or []
    events = []

    for feature in features:
        if not isinstance(feature, dict):
            continue
        event = parse_event(feature)
        if event is not None:
            events.append(event)

    return events
