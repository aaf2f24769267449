"""Unit tests for message formatting.

Pure function tests - no mocks needed.
"""

from datetime import datetime, timedelta, timezone

import pytest

from quakewatch.core.earthquake import Event
from quakewatch.core.formatter import (
    NOTIFICATION_TITLE,
    format_depth,
    format_event_count,
    format_event_details,
    format_last_updated,
    format_magnitude,
    format_notification,
    format_relative_time,
    format_slack_message,
    get_magnitude_radius_m,
    get_severity_label,
)


NOW = datetime(2024, 3, 15, 18, 0, 0, tzinfo=timezone.utc)


def make_event(**kwargs) -> Event:
    defaults = {
        "id": "test123",
        "magnitude": 5.8,
        "place": "50 km SW of Port Hardy, Canada",
        "time": datetime(2024, 3, 15, 17, 30, 0, tzinfo=timezone.utc),
        "latitude": 50.3,
        "longitude": -128.0,
        "depth_km": 12.0,
        "url": "https://earthquake.usgs.gov/earthquakes/eventpage/test123",
    }
    defaults.update(kwargs)
    return Event(**defaults)


class TestGetSeverityLabel:
    """Tests for get_severity_label() pure function."""

    @pytest.mark.parametrize("magnitude,expected", [
        (6.5, "Major"),
        (6.0, "Major"),
        (5.5, "Moderate"),
        (4.2, "Light"),
        (3.0, "Minor"),
        (1.1, "Micro"),
        (None, "Micro"),
    ])
    def test_labels(self, magnitude, expected):
        assert get_severity_label(magnitude) == expected


class TestGetMagnitudeRadius:

    @pytest.mark.parametrize("magnitude,expected", [
        (7.0, 50_000.0),
        (5.0, 35_000.0),
        (4.5, 25_000.0),
        (3.0, 15_000.0),
        (2.0, 10_000.0),
        (0.5, 5_000.0),
        (None, 5_000.0),
    ])
    def test_radius(self, magnitude, expected):
        assert get_magnitude_radius_m(magnitude) == expected


class TestFieldFormatting:

    def test_magnitude(self):
        assert format_magnitude(4.2) == "M4.2"
        assert format_magnitude(6.0) == "M6.0"

    def test_absent_magnitude(self):
        assert format_magnitude(None) == "M?"

    def test_depth(self):
        assert format_depth(10.5) == "10.5 km"

    def test_absent_depth_is_unknown_not_zero(self):
        assert format_depth(None) == "Unknown depth"

    @pytest.mark.parametrize("count,expected", [
        (0, "0 events"),
        (1, "1 event"),
        (12, "12 events"),
    ])
    def test_event_count(self, count, expected):
        assert format_event_count(count) == expected


class TestFormatRelativeTime:
    """Tests for format_relative_time() pure function."""

    @pytest.mark.parametrize("elapsed,expected", [
        (timedelta(seconds=20), "0m ago"),
        (timedelta(minutes=42), "42m ago"),
        (timedelta(hours=3, minutes=5), "3h ago"),
        (timedelta(days=2, hours=1), "2d ago"),
    ])
    def test_relative(self, elapsed, expected):
        assert format_relative_time(NOW - elapsed, NOW) == expected

    def test_older_than_week_shows_date(self):
        assert format_relative_time(datetime(2024, 3, 1, tzinfo=timezone.utc), NOW) == "Mar 01"

    def test_future_time_clamped(self):
        assert format_relative_time(NOW + timedelta(minutes=5), NOW) == "0m ago"


class TestFormatLastUpdated:

    def test_not_updated(self):
        assert format_last_updated(None) == "Not updated yet"

    def test_formats_in_given_timezone(self):
        assert format_last_updated(NOW, timezone.utc) == "Last updated: 18:00:00"


class TestFormatNotification:
    """Tests for format_notification() pure function."""

    def test_title_and_body(self):
        title, body = format_notification(make_event())

        assert title == NOTIFICATION_TITLE
        assert body == "M5.8 - 50 km SW of Port Hardy, Canada"

    def test_missing_place(self):
        _, body = format_notification(make_event(place=None))
        assert body == "M5.8 - Unknown location"


class TestFormatEventDetails:

    def test_felt_only_when_present(self):
        without = format_event_details(make_event(felt=None))
        with_felt = format_event_details(make_event(felt=40))

        assert not any(line.startswith("Felt Reports") for line in without)
        assert "Felt Reports: 40 people" in with_felt

    def test_includes_coordinates_and_depth(self):
        lines = format_event_details(make_event())

        assert "Coordinates: 50.3000, -128.0000" in lines
        assert "Depth: 12.0 km" in lines
        assert lines[0] == "M5.8 (Moderate)"


class TestFormatSlackMessage:
    """Tests for format_slack_message() pure function."""

    def test_has_text_and_blocks(self):
        result = format_slack_message(make_event())

        assert result["text"] == f"{NOTIFICATION_TITLE} M5.8 - 50 km SW of Port Hardy, Canada"
        assert result["blocks"][0]["type"] == "header"
        assert result["blocks"][0]["text"]["text"] == NOTIFICATION_TITLE

    def test_includes_usgs_button(self):
        result = format_slack_message(make_event())

        actions = [b for b in result["blocks"] if b["type"] == "actions"]
        assert actions[0]["elements"][0]["url"].endswith("test123")

    def test_no_button_without_url(self):
        result = format_slack_message(make_event(url=None))

        assert all(b["type"] != "actions" for b in result["blocks"])

    def test_felt_context(self):
        result = format_slack_message(make_event(felt=15))

        context = [b for b in result["blocks"] if b["type"] == "context"]
        assert "15 people" in context[0]["elements"][0]["text"]
