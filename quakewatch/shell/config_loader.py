"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, RegionBounds, QueryCriteria) are defined in the core
package to avoid information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from quakewatch.core.config import DEFAULT_FEED_URL, Config
from quakewatch.core.criteria import QueryCriteria
from quakewatch.core.dedup import DEFAULT_ALERT_THRESHOLD
from quakewatch.core.geo import WESTERN_CANADA, RegionBounds


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _resolve_value(value: Any) -> Any:
    """Resolve a ``${VAR}`` placeholder from the environment.

    Non-string values and plain strings are returned unchanged. An unset
    variable leaves the placeholder in place.
    """
    if not isinstance(value, str):
        return value

    if value.startswith("${") and value.endswith("}"):
        var_name = value[2:-1]
        env_value = os.environ.get(var_name)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_name)

    return value


def _parse_bounds(data: dict[str, Any]) -> RegionBounds:
    """Parse a bounding box from config data."""
    return RegionBounds(
        min_latitude=float(data["min_latitude"]),
        max_latitude=float(data["max_latitude"]),
        min_longitude=float(data["min_longitude"]),
        max_longitude=float(data["max_longitude"]),
    )


def _parse_criteria(data: dict[str, Any]) -> QueryCriteria:
    """Parse the initial query criteria from config data.

    Raises:
        ValueError: If a criteria value is invalid
    """
    return QueryCriteria(
        time_range=data.get("time_range", "week"),
        min_magnitude=float(data.get("min_magnitude", 0.0)),
        search_term=str(data.get("search_term") or ""),
        sort_field=data.get("sort_field", "time"),
        sort_direction=data.get("sort_direction", "descending"),
    )


def _webhook_or_none(value: Any) -> str | None:
    """Unset or unresolved webhook URLs disable Slack notifications."""
    if not value or not isinstance(value, str) or value.startswith("${"):
        return None
    return value


def _parse_bool(value: Any) -> bool:
    """Parse a flag; strings such as "false" or "yes" are read by value."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


def _parse_delays(value: Any) -> tuple[float, ...]:
    if isinstance(value, (int, float)):
        return (float(value),)
    return tuple(float(v) for v in value)


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only env var expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    alerts = data.get("alerts") or {}

    region = WESTERN_CANADA
    if "region" in data:
        region = _parse_bounds(data["region"])

    webhook_url = _resolve_value(alerts.get("slack_webhook_url"))

    config = Config(
        feed_url=data.get("feed_url", DEFAULT_FEED_URL),
        request_timeout_seconds=float(data.get("request_timeout_seconds", 30)),
        refresh_interval_seconds=float(data.get("refresh_interval_seconds", 300)),
        alert_threshold=float(alerts.get("threshold", DEFAULT_ALERT_THRESHOLD)),
        alert_on_first_fetch=_parse_bool(alerts.get("alert_on_first_fetch", False)),
        region=region,
        default_criteria=_parse_criteria(data.get("criteria") or {}),
        slack_webhook_url=_webhook_or_none(webhook_url),
    )

    if "retry_delays_seconds" in data:
        config.retry_delays_seconds = _parse_delays(data["retry_delays_seconds"])

    return config


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
        ValueError: If a value has the wrong type or is out of range
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return load_config_from_env()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return load_config_from_env()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: refresh every %ss, alert threshold M%.1f, slack %s",
        config.refresh_interval_seconds,
        config.alert_threshold,
        "enabled" if config.slack_webhook_url else "disabled",
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file. Unset variables
    keep their defaults.

    Environment variables:
        SLACK_WEBHOOK_URL: Webhook URL for alerts
        QUAKEWATCH_REFRESH_SECONDS: Automatic refresh period
        QUAKEWATCH_ALERT_THRESHOLD: Minimum magnitude that alerts
        QUAKEWATCH_ALERT_ON_FIRST_FETCH: Alert on the first fetch (true/false)
        QUAKEWATCH_TIME_RANGE: Initial time range
        QUAKEWATCH_MIN_MAGNITUDE: Initial minimum magnitude

    Returns:
        Config object from environment
    """
    config = Config()

    webhook_url = os.environ.get("SLACK_WEBHOOK_URL")
    if webhook_url:
        config.slack_webhook_url = webhook_url

    refresh = os.environ.get("QUAKEWATCH_REFRESH_SECONDS")
    if refresh:
        config.refresh_interval_seconds = float(refresh)

    threshold = os.environ.get("QUAKEWATCH_ALERT_THRESHOLD")
    if threshold:
        config.alert_threshold = float(threshold)

    first_fetch = os.environ.get("QUAKEWATCH_ALERT_ON_FIRST_FETCH")
    if first_fetch:
        config.alert_on_first_fetch = _parse_bool(first_fetch)

    criteria_changes: dict[str, Any] = {}
    time_range = os.environ.get("QUAKEWATCH_TIME_RANGE")
    if time_range:
        criteria_changes["time_range"] = time_range
    min_magnitude = os.environ.get("QUAKEWATCH_MIN_MAGNITUDE")
    if min_magnitude:
        criteria_changes["min_magnitude"] = float(min_magnitude)
    if criteria_changes:
        config.default_criteria = config.default_criteria.with_changes(**criteria_changes)

    return config
