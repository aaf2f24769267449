"""USGS Feed Client - Imperative Shell.

This module handles HTTP communication with the USGS FDSN event service.
All I/O is contained here; parsing is in the core module.

The client never raises: every failure is returned as a FetchResult with
an error so the caller can keep showing its previous data.
"""

import logging
from dataclasses import dataclass
from typing import Any

import requests

from quakewatch.core.config import DEFAULT_FEED_URL
from quakewatch.core.criteria import QueryCriteria
from quakewatch.core.earthquake import parse_events
from quakewatch.core.geo import RegionBounds
from quakewatch.core.state import FetchResult
from quakewatch.core.time_window import TimeWindow, format_feed_time


logger = logging.getLogger(__name__)


# Default timeout for API requests (seconds)
DEFAULT_TIMEOUT = 30


@dataclass
class FeedQuery:
    """Parameters for one feed query.

    Attributes:
        bounds: Geographic bounding box
        window: Absolute time window
        min_magnitude: Minimum magnitude to fetch
    """
    bounds: RegionBounds
    window: TimeWindow
    min_magnitude: float = 0.0


class FeedClient:
    """Client for fetching earthquake events from the USGS feed.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_FEED_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize feed client.

        Args:
            base_url: Feed query endpoint
            timeout: Request timeout in seconds
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _build_params(self, query: FeedQuery) -> dict[str, str]:
        """Build query parameters for a feed request.

        Args:
            query: Query parameters

        Returns:
            Dict of URL query parameters
        """
        return {
            "format": "geojson",
            "starttime": format_feed_time(query.window.start),
            "endtime": format_feed_time(query.window.end),
            "minlatitude": str(query.bounds.min_latitude),
            "maxlatitude": str(query.bounds.max_latitude),
            "minlongitude": str(query.bounds.min_longitude),
            "maxlongitude": str(query.bounds.max_longitude),
            "minmagnitude": str(query.min_magnitude),
        }

    def fetch(
        self,
        criteria: QueryCriteria,
        bounds: RegionBounds,
        window: TimeWindow,
    ) -> FetchResult:
        """Fetch events for the region, window and minimum magnitude.

        This method performs HTTP I/O.

        Args:
            criteria: Current criteria (only min_magnitude is sent)
            bounds: Region to query
            window: Absolute time window

        Returns:
            FetchResult with events in feed order, or an error
        """
        return self.fetch_query(FeedQuery(
            bounds=bounds,
            window=window,
            min_magnitude=criteria.min_magnitude,
        ))

    def fetch_query(self, query: FeedQuery) -> FetchResult:
        """Run one feed query. Never raises."""
        params = self._build_params(query)

        logger.info(
            "Fetching earthquakes from USGS",
            extra={"params": params},
        )

        try:
            response = self.session.get(
                self.base_url,
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.Timeout:
            logger.error("USGS feed request timed out after %ss", self.timeout)
            return FetchResult.failure("Failed to fetch earthquakes: request timed out")
        except requests.RequestException as e:
            logger.error("USGS feed request failed: %s", str(e))
            return FetchResult.failure(f"Failed to fetch earthquakes: {e}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error("USGS feed returned invalid JSON: %s", str(e))
            return FetchResult.failure("Failed to fetch earthquakes: invalid response from feed")

        return self._parse_response(data)

    def _parse_response(self, data: Any) -> FetchResult:
        if not isinstance(data, dict) or not isinstance(data.get("features"), list):
            logger.error("USGS feed response has no features list")
            return FetchResult.failure("Failed to fetch earthquakes: malformed response from feed")

        features = data["features"]
        events = parse_events(data)

        if len(events) < len(features):
            logger.warning(
                "Skipped %d malformed features",
                len(features) - len(events),
            )

        logger.info("Fetched %d earthquakes from USGS", len(events))

        return FetchResult.ok(events)
