"""Message formatting - Pure functions.

This module formats events into notification messages and display text.
All functions are pure with no side effects.

Absent optional fields are rendered as "unknown" rather than as zero.
"""

from datetime import datetime, timezone
from typing import Any

from quakewatch.core.earthquake import Event


NOTIFICATION_TITLE = "Significant Earthquake Detected!"
UNKNOWN_PLACE = "Unknown location"
UNKNOWN_DEPTH = "Unknown depth"


def get_severity_label(magnitude: float | None) -> str:
    """Get a human-readable severity label.

    Pure function. Absent magnitude is treated as 0.
    """
    magnitude = magnitude or 0.0
    if magnitude >= 6.0:
        return "Major"
    elif magnitude >= 5.0:
        return "Moderate"
    elif magnitude >= 4.0:
        return "Light"
    elif magnitude >= 3.0:
        return "Minor"
    else:
        return "Micro"


def get_magnitude_radius_m(magnitude: float | None) -> float:
    """Map circle radius in metres for an event's magnitude.

    Pure function.
    """
    magnitude = magnitude or 0.0
    if magnitude >= 6.0:
        return 50_000.0
    elif magnitude >= 5.0:
        return 35_000.0
    elif magnitude >= 4.0:
        return 25_000.0
    elif magnitude >= 3.0:
        return 15_000.0
    elif magnitude >= 2.0:
        return 10_000.0
    else:
        return 5_000.0


def format_magnitude(magnitude: float | None) -> str:
    """Format magnitude as ``M4.2`` (``M?`` when absent)."""
    if magnitude is None:
        return "M?"
    return f"M{magnitude:.1f}"


def format_place(place: str | None) -> str:
    return place if place else UNKNOWN_PLACE


def format_depth(depth_km: float | None) -> str:
    if depth_km is None:
        return UNKNOWN_DEPTH
    return f"{depth_km:.1f} km"


def format_coordinates(latitude: float, longitude: float) -> str:
    return f"{latitude:.4f}, {longitude:.4f}"


def format_relative_time(time: datetime, now: datetime) -> str:
    """Format an event time relative to ``now``.

    Pure function.

    Returns:
        "Nm ago" under an hour, "Nh ago" under a day, "Nd ago" under a
        week, otherwise the date as "Mon DD"
    """
    elapsed = max(0, int((now - time).total_seconds()))
    minutes = elapsed // 60
    hours = minutes // 60
    days = hours // 24

    if minutes < 60:
        return f"{minutes}m ago"
    elif hours < 24:
        return f"{hours}h ago"
    elif days < 7:
        return f"{days}d ago"
    return time.strftime("%b %d")


def format_event_count(count: int) -> str:
    """Format ``1 event`` / ``N events``."""
    return f"{count} event{'' if count == 1 else 's'}"


def format_last_updated(updated_at: datetime | None, tz: timezone | None = None) -> str:
    """Format the snapshot time for a status line.

    Args:
        updated_at: When the snapshot was fetched
        tz: Display timezone (local time if None)
    """
    if updated_at is None:
        return "Not updated yet"
    return f"Last updated: {updated_at.astimezone(tz).strftime('%H:%M:%S')}"


def format_notification(event: Event) -> tuple[str, str]:
    """Format the title and body of a significant-event notification.

    Pure function.

    Returns:
        (title, body) where body is ``M<mag> - <place>``
    """
    body = f"M{event.sort_magnitude:.1f} - {format_place(event.place)}"
    return NOTIFICATION_TITLE, body


def format_event_line(event: Event, now: datetime) -> str:
    """Format a one-line list row for an event.

    Pure function.
    """
    return (
        f"{format_magnitude(event.magnitude):>5}  "
        f"{format_relative_time(event.time, now):>9}  "
        f"{format_place(event.place)}  "
        f"(depth: {format_depth(event.depth_km)})"
    )


def format_event_details(event: Event) -> list[str]:
    """Format the detail card lines for a selected event.

    Pure function. Felt reports are only listed when present.
    """
    lines = [
        f"{format_magnitude(event.magnitude)} ({get_severity_label(event.magnitude)})",
        format_place(event.place),
        f"Time: {event.time.strftime('%b %d, %Y %H:%M:%S UTC')}",
        f"Depth: {format_depth(event.depth_km)}",
        f"Coordinates: {format_coordinates(event.latitude, event.longitude)}",
    ]
    if event.felt is not None:
        lines.append(f"Felt Reports: {event.felt} people")
    if event.url:
        lines.append(f"Details: {event.url}")
    return lines


def format_slack_message(event: Event) -> dict[str, Any]:
    """Format a significant event as a Slack message payload.

    Pure function.

    Args:
        event: Event to format

    Returns:
        Slack message payload dict
    """
    title, body = format_notification(event)
    maps_url = f"https://www.google.com/maps?q={event.latitude},{event.longitude}"

    blocks: list[dict[str, Any]] = [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": title,
            },
        },
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"*{body}*\n<{maps_url}|Map> | depth {format_depth(event.depth_km)}",
            },
        },
    ]

    if event.felt:
        blocks.append({
            "type": "context",
            "elements": [
                {"type": "mrkdwn", "text": f"Felt by {event.felt} people"},
            ],
        })

    if event.url:
        blocks.append({
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": {
                        "type": "plain_text",
                        "text": "View on USGS",
                    },
                    "url": event.url,
                },
            ],
        })

    return {
        "text": f"{title} {body}",
        "blocks": blocks,
    }
