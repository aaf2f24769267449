#!/usr/bin/env python3
"""Send a test alert through the configured alert sink.

WARNING: With a Slack webhook configured this posts a REAL message.

This script creates a synthetic significant event and sends it through
the same sink the monitor uses, so notification formatting and webhook
setup can be checked without waiting for an earthquake.

Usage:
    # Dry run (preview only, no sends)
    python scripts/send_test_alert.py --dry-run

    # Send with a custom magnitude and place
    python scripts/send_test_alert.py --magnitude 6.2 --location "20km W of Tofino, BC"

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    SLACK_WEBHOOK_URL: Webhook URL when the config uses ${SLACK_WEBHOOK_URL}
"""

import argparse
import logging
import os
import sys
from datetime import datetime, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from quakewatch.core.earthquake import Event
from quakewatch.core.formatter import format_notification
from quakewatch.shell.alert_sink import create_alert_sink
from quakewatch.shell.config_loader import load_config

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def create_test_event(
    magnitude: float = 5.5,
    location: str = "[TEST] 15km SW of Port Alice, BC",
    latitude: float = 50.3,
    longitude: float = -127.6,
) -> Event:
    """Create a synthetic test event.

    Args:
        magnitude: Event magnitude
        location: Location description
        latitude: Epicenter latitude
        longitude: Epicenter longitude

    Returns:
        Synthetic Event object
    """
    now = datetime.now(timezone.utc)
    return Event(
        id="test-event-" + now.strftime("%Y%m%d%H%M%S"),
        magnitude=magnitude,
        place=location,
        time=now,
        latitude=latitude,
        longitude=longitude,
        depth_km=10.0,
        felt=None,
        url=None,
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Send a test alert through the configured sink",
        epilog="WARNING: This sends a REAL notification when Slack is configured. Use --dry-run first.",
    )
    parser.add_argument(
        "--magnitude",
        type=float,
        default=5.5,
        help="Event magnitude for test (default: 5.5)",
    )
    parser.add_argument(
        "--location",
        type=str,
        default="[TEST] 15km SW of Port Alice, BC",
        help="Location description",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print what would be sent without actually sending",
    )
    args = parser.parse_args()

    config = load_config()
    event = create_test_event(magnitude=args.magnitude, location=args.location)
    title, body = format_notification(event)

    logger.info("Test alert: %s %s", title, body)
    logger.info("Slack: %s", "enabled" if config.slack_webhook_url else "disabled (log only)")

    if args.dry_run:
        logger.info("DRY RUN - nothing sent")
        return 0

    create_alert_sink(config.slack_webhook_url).notify(event)
    logger.info("Test alert dispatched")
    return 0


if __name__ == "__main__":
    sys.exit(main())
