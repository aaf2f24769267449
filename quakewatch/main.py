"""Console Entry Point.

Loads configuration, then either runs a single fetch (``--once``) or
keeps a refresh scheduler running and reprints the earthquake list after
every completed refresh until interrupted.
"""

import argparse
import logging
import os
import sys
import threading
from datetime import datetime, timezone

import yaml

from quakewatch.core.config import Config, validate_config
from quakewatch.core.criteria import SORT_DIRECTIONS, SORT_FIELDS, TIME_RANGES
from quakewatch.core.formatter import (
    format_event_count,
    format_event_details,
    format_event_line,
    format_last_updated,
)
from quakewatch.core.state import SUCCEEDED, FAILED
from quakewatch.core.store import QuakeStore
from quakewatch.core.time_window import compute_time_window
from quakewatch.scheduler import RefreshScheduler
from quakewatch.shell.config_loader import load_config
from quakewatch.shell.feed_client import FeedClient


logger = logging.getLogger(__name__)

# Rows printed per refresh in the terminal view
MAX_ROWS = 25


def configure_logging() -> None:
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quakewatch",
        description="Monitor recent earthquakes in Western Canada",
    )
    parser.add_argument("--config", help="Path to YAML config (default: $CONFIG_PATH or config/config.yaml)")
    parser.add_argument("--time-range", choices=TIME_RANGES, help="How far back to query")
    parser.add_argument("--min-magnitude", type=float, help="Minimum magnitude to fetch")
    parser.add_argument("--search", help="Only show events whose place contains this text")
    parser.add_argument("--sort", choices=SORT_FIELDS, help="Sort field")
    parser.add_argument("--order", choices=SORT_DIRECTIONS, help="Sort direction")
    parser.add_argument("--once", action="store_true", help="Fetch once, print and exit")
    return parser


def _criteria_overrides(args: argparse.Namespace) -> dict:
    overrides = {
        "time_range": args.time_range,
        "min_magnitude": args.min_magnitude,
        "search_term": args.search,
        "sort_field": args.sort,
        "sort_direction": args.order,
    }
    return {k: v for k, v in overrides.items() if v is not None}


def render(events, refresh_state, last_updated, selected=None, now=None) -> str:
    """Render the terminal view of the session state."""
    now = now or datetime.now(timezone.utc)
    lines = [
        f"Recent Earthquakes - {format_event_count(len(events))} - {format_last_updated(last_updated)}",
    ]
    if refresh_state.status == FAILED:
        lines.append(f"! {refresh_state.reason}")

    for event in events[:MAX_ROWS]:
        lines.append("  " + format_event_line(event, now))
    if len(events) > MAX_ROWS:
        lines.append(f"  ...and {len(events) - MAX_ROWS} more")

    if selected is not None:
        lines.append("")
        lines.extend("  " + line for line in format_event_details(selected))

    return "\n".join(lines)


def run_once(config: Config) -> int:
    """Fetch once and print the derived view. Returns exit code."""
    store = QuakeStore(config.default_criteria)
    client = FeedClient(base_url=config.feed_url, timeout=config.request_timeout_seconds)

    window = compute_time_window(store.criteria.time_range, datetime.now(timezone.utc))
    result = client.fetch(store.criteria, config.region, window)
    store.apply_fetch_result(result)

    print(render(store.derived_view(), store.refresh_state, store.last_updated))
    return 0 if result.success else 1


def run_watch(config: Config) -> int:
    """Run the scheduler until interrupted."""
    scheduler = RefreshScheduler.from_config(config)

    def on_change(s: RefreshScheduler) -> None:
        state = s.refresh_state
        if state.status in (SUCCEEDED, FAILED):
            print(render(s.derived_view(), state, s.last_updated, s.selected_event))
            print()

    scheduler.add_listener(on_change)
    scheduler.start()

    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        scheduler.stop()

    return 0


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        overrides = _criteria_overrides(args)
        if overrides:
            config.default_criteria = config.default_criteria.with_changes(**overrides)
    except (ValueError, KeyError, TypeError, yaml.YAMLError) as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    validation = validate_config(config)
    for warning in validation.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    if not validation.valid:
        for error in validation.critical_errors:
            logger.error("Config %s: %s", error.field, error.message)
        return 2

    if args.once:
        return run_once(config)
    return run_watch(config)


if __name__ == "__main__":
    sys.exit(main())
