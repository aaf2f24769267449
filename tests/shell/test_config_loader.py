"""Tests for the Configuration Loader module.

Tests configuration loading from YAML files and environment variables.
"""

import os
from unittest.mock import patch

import pytest

from quakewatch.core.config import DEFAULT_FEED_URL
from quakewatch.core.geo import WESTERN_CANADA, RegionBounds
from quakewatch.shell.config_loader import (
    _parse_bool,
    _parse_bounds,
    _parse_delays,
    _resolve_value,
    _webhook_or_none,
    load_config,
    load_config_from_dict,
    load_config_from_env,
)


SAMPLE_YAML = """
feed_url: https://feed.example.com/query
request_timeout_seconds: 15
refresh_interval_seconds: 120
retry_delays_seconds: [10, 20]

region:
  min_latitude: 48.0
  max_latitude: 60.0
  min_longitude: -139.0
  max_longitude: -114.0

criteria:
  time_range: day
  min_magnitude: 2.5
  sort_field: magnitude

alerts:
  threshold: 6.0
  alert_on_first_fetch: true
  slack_webhook_url: ${TEST_SLACK_WEBHOOK}
"""


class TestResolveValue:
    """Tests for _resolve_value function."""

    def test_returns_non_string_unchanged(self):
        assert _resolve_value(123) == 123
        assert _resolve_value(None) is None

    def test_returns_plain_string_unchanged(self):
        assert _resolve_value("https://example.com") == "https://example.com"

    def test_resolves_env_var_placeholder(self):
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert _resolve_value("${TEST_VAR}") == "test_value"

    def test_returns_placeholder_if_env_var_not_set(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _resolve_value("${UNDEFINED_VAR}") == "${UNDEFINED_VAR}"


class TestWebhookOrNone:

    @pytest.mark.parametrize("value", [None, "", "${SLACK_WEBHOOK_URL}", 42])
    def test_disabled_values(self, value):
        assert _webhook_or_none(value) is None

    def test_real_url(self):
        url = "https://hooks.slack.com/services/T/B/X"
        assert _webhook_or_none(url) == url


class TestParseHelpers:

    def test_parse_bounds(self):
        bounds = _parse_bounds({
            "min_latitude": "48",
            "max_latitude": 60,
            "min_longitude": -139,
            "max_longitude": -114,
        })

        assert bounds == RegionBounds(48.0, 60.0, -139.0, -114.0)

    def test_parse_delays_list(self):
        assert _parse_delays([5, 10]) == (5.0, 10.0)

    def test_parse_bool_quoted_false(self):
        assert _parse_bool("false") is False
        assert _parse_bool(" ON ") is True

    def test_parse_delays_scalar(self):
        assert _parse_delays(45) == (45.0,)


class TestLoadConfigFromDict:
    """Tests for load_config_from_dict()."""

    def test_empty_dict_uses_defaults(self):
        config = load_config_from_dict({})

        assert config.feed_url == DEFAULT_FEED_URL
        assert config.region == WESTERN_CANADA
        assert config.refresh_interval_seconds == 300.0
        assert config.alert_threshold == 5.5
        assert config.slack_webhook_url is None
        assert config.default_criteria.time_range == "week"

    @pytest.mark.parametrize("value,expected", [
        ("false", False),
        ("False", False),
        ("true", True),
        ("yes", True),
        (False, False),
        (True, True),
    ])
    def test_alert_on_first_fetch_parsing(self, value, expected):
        config = load_config_from_dict({"alerts": {"alert_on_first_fetch": value}})

        assert config.alert_on_first_fetch is expected

    def test_invalid_criteria_raises(self):
        with pytest.raises(ValueError):
            load_config_from_dict({"criteria": {"time_range": "forever"}})


class TestLoadConfig:
    """Tests for load_config() with YAML files."""

    def test_loads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(SAMPLE_YAML)

        with patch.dict(os.environ, {"TEST_SLACK_WEBHOOK": "https://hooks.slack.com/services/T/B/X"}):
            config = load_config(path)

        assert config.feed_url == "https://feed.example.com/query"
        assert config.request_timeout_seconds == 15.0
        assert config.refresh_interval_seconds == 120.0
        assert config.retry_delays_seconds == (10.0, 20.0)
        assert config.region.max_latitude == 60.0
        assert config.default_criteria.time_range == "day"
        assert config.default_criteria.min_magnitude == 2.5
        assert config.default_criteria.sort_field == "magnitude"
        assert config.alert_threshold == 6.0
        assert config.alert_on_first_fetch is True
        assert config.slack_webhook_url == "https://hooks.slack.com/services/T/B/X"

    def test_unresolved_webhook_disables_slack(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(SAMPLE_YAML)

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(path)

        assert config.slack_webhook_url is None

    def test_missing_file_falls_back_to_env(self, tmp_path):
        with patch.dict(os.environ, {"QUAKEWATCH_ALERT_THRESHOLD": "4.5"}, clear=True):
            config = load_config(tmp_path / "missing.yaml")

        assert config.alert_threshold == 4.5

    def test_empty_file_falls_back_to_env(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        with patch.dict(os.environ, {}, clear=True):
            config = load_config(path)

        assert config.refresh_interval_seconds == 300.0

    def test_uses_config_path_env_var(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("refresh_interval_seconds: 90\n")

        with patch.dict(os.environ, {"CONFIG_PATH": str(path)}, clear=True):
            config = load_config()

        assert config.refresh_interval_seconds == 90.0


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env()."""

    def test_defaults_when_unset(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_config_from_env()

        assert config.slack_webhook_url is None
        assert config.alert_on_first_fetch is False

    def test_reads_variables(self):
        env = {
            "SLACK_WEBHOOK_URL": "https://hooks.slack.com/services/T/B/X",
            "QUAKEWATCH_REFRESH_SECONDS": "600",
            "QUAKEWATCH_ALERT_ON_FIRST_FETCH": "yes",
            "QUAKEWATCH_TIME_RANGE": "month",
            "QUAKEWATCH_MIN_MAGNITUDE": "3",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config_from_env()

        assert config.slack_webhook_url == "https://hooks.slack.com/services/T/B/X"
        assert config.refresh_interval_seconds == 600.0
        assert config.alert_on_first_fetch is True
        assert config.default_criteria.time_range == "month"
        assert config.default_criteria.min_magnitude == 3.0
