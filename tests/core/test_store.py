"""Unit tests for QuakeStore.

The store is plain state with named operations, so tests construct it
directly and invoke operations - no mocks needed.
"""

from datetime import datetime, timedelta, timezone

import pytest

from quakewatch.core.criteria import QueryCriteria
from quakewatch.core.earthquake import Event, parse_events
from quakewatch.core.state import FAILED, IDLE, IN_FLIGHT, SUCCEEDED, FetchResult
from quakewatch.core.store import QuakeStore


BASE_TIME = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
NOW = datetime(2024, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


def make_event(event_id, magnitude=3.0, place="Somewhere, BC", minutes=0):
    return Event(
        id=event_id,
        magnitude=magnitude,
        place=place,
        time=BASE_TIME + timedelta(minutes=minutes),
        latitude=49.0,
        longitude=-123.0,
        depth_km=10.0,
    )


@pytest.fixture
def store():
    return QuakeStore(clock=lambda: NOW)


@pytest.fixture
def events():
    return [
        make_event("a", magnitude=6.1, place="Victoria, BC", minutes=0),
        make_event("b", magnitude=3.2, place="Nanaimo, BC", minutes=10),
        make_event("c", magnitude=5.8, place=None, minutes=20),
    ]


class TestInitialState:

    def test_starts_empty_and_idle(self, store):
        assert store.events == ()
        assert store.derived_view() == ()
        assert store.refresh_state.status == IDLE
        assert store.selected_event is None
        assert store.last_updated is None
        assert store.error is None

    def test_uses_given_criteria(self):
        criteria = QueryCriteria(time_range="day")
        assert QuakeStore(criteria).criteria is criteria


class TestApplyFetchResult:
    """Tests for apply_fetch_result()."""

    def test_success_replaces_snapshot(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))

        assert [e.id for e in store.events] == ["a", "b", "c"]
        assert store.refresh_state.status == SUCCEEDED
        assert store.refresh_state.at == NOW
        assert store.last_updated == NOW

    def test_success_replaces_wholesale(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))
        store.apply_fetch_result(FetchResult.ok([make_event("d")]))

        assert [e.id for e in store.events] == ["d"]

    def test_success_recomputes_view(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))

        # Default sort: time descending
        assert [e.id for e in store.derived_view()] == ["c", "b", "a"]

    def test_failure_keeps_previous_data(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))
        view_before = store.derived_view()

        store.apply_fetch_result(FetchResult.failure("Failed to fetch earthquakes: boom"))

        assert store.refresh_state.status == FAILED
        assert store.refresh_state.reason == "Failed to fetch earthquakes: boom"
        assert store.error == "Failed to fetch earthquakes: boom"
        assert store.derived_view() == view_before
        assert [e.id for e in store.events] == ["a", "b", "c"]

    def test_failure_then_success_recovers(self, store, events):
        store.apply_fetch_result(FetchResult.failure("down"))
        store.apply_fetch_result(FetchResult.ok(events))

        assert store.refresh_state.status == SUCCEEDED
        assert store.error is None
        assert len(store.derived_view()) == 3

    def test_clears_selection_when_event_disappears(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))
        store.select("b")

        store.apply_fetch_result(FetchResult.ok([make_event("a"), make_event("c")]))

        assert store.selected_id is None

    def test_keeps_selection_when_event_remains(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))
        store.select("b")

        store.apply_fetch_result(FetchResult.ok(events))

        assert store.selected_event.id == "b"

    def test_begin_refresh_marks_in_flight(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))
        store.begin_refresh()

        assert store.refresh_state.status == IN_FLIGHT
        assert store.is_loading is True
        assert len(store.events) == 3


class TestSetCriteria:
    """Tests for set_criteria()."""

    @pytest.mark.parametrize("changes", [
        {"time_range": "month"},
        {"min_magnitude": 2.0},
    ])
    def test_query_changes_require_fetch(self, store, changes):
        version = store.criteria_version

        assert store.set_criteria(**changes) is True
        assert store.criteria_version == version + 1

    @pytest.mark.parametrize("changes", [
        {"search_term": "Victoria"},
        {"sort_field": "depth"},
        {"sort_direction": "ascending"},
    ])
    def test_view_changes_do_not_require_fetch(self, store, changes):
        version = store.criteria_version

        assert store.set_criteria(**changes) is False
        assert store.criteria_version == version

    def test_unchanged_value_is_noop(self, store):
        assert store.set_criteria(time_range="week") is False

    def test_search_recomputes_view(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))

        store.set_criteria(search_term="Victoria")

        assert [e.id for e in store.derived_view()] == ["a"]

    def test_sort_recomputes_view(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))

        store.set_criteria(sort_field="magnitude", sort_direction="descending")

        assert [e.id for e in store.derived_view()] == ["a", "c", "b"]

    def test_query_change_leaves_view_until_fetch(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))
        view_before = store.derived_view()

        store.set_criteria(min_magnitude=5.0)

        assert store.derived_view() is view_before

    def test_invalid_change_leaves_state(self, store):
        with pytest.raises(ValueError):
            store.set_criteria(sort_field="bogus")

        assert store.criteria == QueryCriteria()


class TestDerivedView:
    """Properties of derived_view()."""

    def test_pure_between_mutations(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))

        assert store.derived_view() == store.derived_view()

    def test_search_scenario_null_place_never_matches(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))
        store.set_criteria(search_term="victoria")

        assert [e.id for e in store.derived_view()] == ["a"]

    def test_search_over_feature_with_numeric_place(self, store):
        parsed = parse_events({"features": [
            {
                "id": "odd",
                "properties": {"mag": 4.0, "place": 12345, "time": 1710500000000},
                "geometry": {"coordinates": [-123.4, 48.4, 10.0]},
            },
            {
                "id": "vic",
                "properties": {"mag": 3.0, "place": "Victoria, BC", "time": 1710500000000},
                "geometry": {"coordinates": [-123.4, 48.4, 10.0]},
            },
        ]})
        store.set_criteria(search_term="victoria")

        store.apply_fetch_result(FetchResult.ok(parsed))

        assert [e.id for e in store.derived_view()] == ["vic"]
        assert store.refresh_state.status == SUCCEEDED

    def test_magnitude_scenario(self, store, events):
        store.set_criteria(sort_field="magnitude", sort_direction="descending")
        store.apply_fetch_result(FetchResult.ok(events))

        result = store.derived_view()

        assert [(e.id, e.magnitude) for e in result] == [("a", 6.1), ("c", 5.8), ("b", 3.2)]


class TestSelect:
    """Tests for select()."""

    def test_select_sets_event(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))
        store.select("a")

        assert store.selected_event.id == "a"

    def test_select_same_toggles_off(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))
        store.select("a")
        store.select("a")

        assert store.selected_event is None

    def test_select_other_switches(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))
        store.select("a")
        store.select("b")

        assert store.selected_id == "b"

    def test_unknown_id_ignored(self, store, events):
        store.apply_fetch_result(FetchResult.ok(events))
        store.select("missing")

        assert store.selected_id is None
