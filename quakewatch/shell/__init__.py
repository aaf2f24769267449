"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- USGS feed client (HTTP)
- Alert sinks (logging, Slack webhook)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from quakewatch.shell.feed_client import FeedClient
from quakewatch.shell.alert_sink import AlertSink, LoggingAlertSink, SlackAlertSink
from quakewatch.shell.config_loader import load_config

__all__ = [
    "FeedClient",
    "AlertSink",
    "LoggingAlertSink",
    "SlackAlertSink",
    "load_config",
]
