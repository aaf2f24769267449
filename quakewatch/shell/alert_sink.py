"""Alert sinks - Imperative Shell.

An alert sink turns a significant event into a user-visible notification.
Deduplication is the caller's job (AlertDetector); a sink just delivers.
Sinks must never raise: when notifications are unavailable they degrade
to a silent no-op.
"""

import logging
from dataclasses import dataclass

import requests

from quakewatch.core.earthquake import Event
from quakewatch.core.formatter import format_notification, format_slack_message


logger = logging.getLogger(__name__)


# Default timeout for webhook requests (seconds)
DEFAULT_TIMEOUT = 10


@dataclass
class SlackResponse:
    """Response from Slack webhook.

    Attributes:
        success: Whether the message was sent successfully
        status_code: HTTP status code
        error: Error message if failed
    """
    success: bool
    status_code: int
    error: str | None = None


class AlertSink:
    """Interface for notification delivery."""

    def notify(self, event: Event) -> None:
        raise NotImplementedError


class NullAlertSink(AlertSink):
    """Discards every alert."""

    def notify(self, event: Event) -> None:
        return None


class LoggingAlertSink(AlertSink):
    """Writes alerts to the application log."""

    def notify(self, event: Event) -> None:
        title, body = format_notification(event)
        logger.warning("%s %s", title, body)


class SlackAlertSink(AlertSink):
    """Posts alerts to a Slack incoming webhook.

    This is part of the imperative shell - it handles HTTP I/O. Without a
    webhook URL notifications are disabled and ``notify`` does nothing.
    """

    def __init__(
        self,
        webhook_url: str | None,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize Slack sink.

        Args:
            webhook_url: Slack incoming webhook URL (None disables)
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def notify(self, event: Event) -> None:
        if not self.enabled:
            logger.debug("Slack notifications disabled, dropping alert for %s", event.id)
            return
        self.send_message(format_slack_message(event))

    def send_message(self, payload: dict) -> SlackResponse:
        """Send a message to Slack via webhook.

        This method performs HTTP I/O.

        Args:
            payload: Message payload (from formatter)

        Returns:
            SlackResponse indicating success or failure
        """
        logger.info("Sending message to Slack webhook")

        try:
            response = requests.post(
                self.webhook_url,
                json=payload,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
            )

            if response.status_code == 200:
                logger.info("Message sent successfully to Slack")
                return SlackResponse(
                    success=True,
                    status_code=response.status_code,
                )
            else:
                error_text = response.text
                logger.warning(
                    "Slack webhook returned non-200: %d - %s",
                    response.status_code,
                    error_text,
                )
                return SlackResponse(
                    success=False,
                    status_code=response.status_code,
                    error=error_text,
                )

        except requests.Timeout:
            logger.error("Slack webhook request timed out")
            return SlackResponse(
                success=False,
                status_code=0,
                error="Request timed out",
            )
        except requests.RequestException as e:
            logger.error("Slack webhook request failed: %s", str(e))
            return SlackResponse(
                success=False,
                status_code=0,
                error=str(e),
            )


class CompositeAlertSink(AlertSink):
    """Fans an alert out to several sinks."""

    def __init__(self, sinks: list[AlertSink]) -> None:
        self.sinks = list(sinks)

    def notify(self, event: Event) -> None:
        for sink in self.sinks:
            sink.notify(event)


def create_alert_sink(slack_webhook_url: str | None) -> AlertSink:
    """Build the default sink: always log, post to Slack when configured."""
    sinks: list[AlertSink] = [LoggingAlertSink()]
    if slack_webhook_url:
        sinks.append(SlackAlertSink(slack_webhook_url))
    return CompositeAlertSink(sinks)
