"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field

from quakewatch.core.criteria import QueryCriteria
from quakewatch.core.dedup import DEFAULT_ALERT_THRESHOLD
from quakewatch.core.geo import WESTERN_CANADA, RegionBounds


# USGS FDSN Event Web Service query endpoint
DEFAULT_FEED_URL = "https://earthquake.usgs.gov/fdsnws/event/1/query"


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        feed_url: Feed query endpoint
        request_timeout_seconds: HTTP timeout for one feed query
        refresh_interval_seconds: Period of the automatic refresh
        retry_delays_seconds: Backoff delays after consecutive failures
            (the last one repeats)
        alert_threshold: Minimum magnitude that triggers an alert
        alert_on_first_fetch: Alert on the first fetch instead of using
            it as a silent baseline
        region: Fixed query region
        default_criteria: Criteria the session starts with
        slack_webhook_url: Slack webhook for alerts (None disables Slack)
    """
    feed_url: str = DEFAULT_FEED_URL
    request_timeout_seconds: float = 30.0
    refresh_interval_seconds: float = 300.0
    retry_delays_seconds: tuple[float, ...] = (30.0, 60.0, 120.0)
    alert_threshold: float = DEFAULT_ALERT_THRESHOLD
    alert_on_first_fetch: bool = False
    region: RegionBounds = WESTERN_CANADA
    default_criteria: QueryCriteria = field(default_factory=QueryCriteria)
    slack_webhook_url: str | None = None


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def validate_bounds(bounds: RegionBounds, field_name: str) -> list[ValidationError]:
    """Validate a bounding box.

    Pure function.

    Args:
        bounds: Bounding box to validate
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    errors.extend(validate_coordinates(
        bounds.min_latitude, bounds.min_longitude,
        f"{field_name}.min",
    ))
    errors.extend(validate_coordinates(
        bounds.max_latitude, bounds.max_longitude,
        f"{field_name}.max",
    ))

    if bounds.min_latitude > bounds.max_latitude:
        errors.append(ValidationError(
            field=field_name,
            message=f"min_latitude ({bounds.min_latitude}) > max_latitude ({bounds.max_latitude})",
        ))

    if bounds.min_longitude > bounds.max_longitude:
        errors.append(ValidationError(
            field=field_name,
            message=f"min_longitude ({bounds.min_longitude}) > max_longitude ({bounds.max_longitude})",
        ))

    return errors


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    errors.extend(validate_bounds(config.region, "region"))

    if config.refresh_interval_seconds <= 0:
        errors.append(ValidationError(
            field="refresh_interval_seconds",
            message=f"Refresh interval must be positive, got {config.refresh_interval_seconds}",
        ))
    elif config.refresh_interval_seconds < 60:
        errors.append(ValidationError(
            field="refresh_interval_seconds",
            message="Refresh interval under 60s may be throttled by the feed",
            severity="warning",
        ))

    if config.request_timeout_seconds <= 0:
        errors.append(ValidationError(
            field="request_timeout_seconds",
            message=f"Timeout must be positive, got {config.request_timeout_seconds}",
        ))

    if any(delay <= 0 for delay in config.retry_delays_seconds):
        errors.append(ValidationError(
            field="retry_delays_seconds",
            message="Retry delays must be positive",
        ))

    if config.alert_threshold < 0:
        errors.append(ValidationError(
            field="alert_threshold",
            message=f"Alert threshold must be >= 0, got {config.alert_threshold}",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
