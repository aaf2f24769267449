"""Geographic region model - Pure data.

This module defines the bounding box used to scope feed queries.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RegionBounds:
    """Geographic bounding box.

    Attributes:
        min_latitude: Southern boundary
        max_latitude: Northern boundary
        min_longitude: Western boundary
        max_longitude: Eastern boundary
    """
    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float

    def contains(self, latitude: float, longitude: float) -> bool:
        """Check if a point is within this bounding box."""
        return (
            self.min_latitude <= latitude <= self.max_latitude
            and self.min_longitude <= longitude <= self.max_longitude
        )


# British Columbia, Yukon, Alberta and the western Northwest Territories
WESTERN_CANADA = RegionBounds(
    min_latitude=48.0,
    max_latitude=70.0,
    min_longitude=-141.0,
    max_longitude=-101.0,
)
