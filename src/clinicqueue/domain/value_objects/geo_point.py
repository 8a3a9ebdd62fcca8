"""
Geographic coordinate value object.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class GeoPoint:
    """Immutable latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError("Latitude must be between -90 and 90")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError("Longitude must be between -180 and 180")

    def __str__(self) -> str:
        return f"({self.lat}, {self.lng})"
