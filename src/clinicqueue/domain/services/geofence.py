"""
Geofence validation: great-circle distance between a clinic and a patient.
"""

import math
from dataclasses import dataclass
from typing import Optional

from ..value_objects.geo_point import GeoPoint

EARTH_RADIUS_M = 6_371_000.0
DEFAULT_RADIUS_M = 100.0


@dataclass(frozen=True)
class GeofenceResult:
    """Outcome of a geofence check.

    ``distance_m`` is rounded to the nearest meter and is ``None`` when the
    check was skipped because the clinic has no configured center.
    """

    accepted: bool
    distance_m: Optional[int]
    radius_m: float
    skipped: bool = False


def distance_meters(center: GeoPoint, point: GeoPoint) -> float:
    """Haversine distance in meters."""
    phi1 = math.radians(center.lat)
    phi2 = math.radians(point.lat)
    d_phi = math.radians(point.lat - center.lat)
    d_lambda = math.radians(point.lng - center.lng)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def validate(
    center: Optional[GeoPoint],
    radius_m: Optional[float],
    point: GeoPoint,
    default_radius_m: float = DEFAULT_RADIUS_M,
) -> GeofenceResult:
    """Accept ``point`` if it lies within ``radius_m`` of ``center``.

    Clinics without a configured center are not geofenced; the result is an
    acceptance flagged as ``skipped``. A missing or zero radius falls back to
    ``default_radius_m``.
    """
    effective_radius = radius_m or default_radius_m
    if center is None:
        return GeofenceResult(accepted=True, distance_m=None, radius_m=effective_radius, skipped=True)

    distance = distance_meters(center, point)
    return GeofenceResult(
        accepted=distance <= effective_radius,
        distance_m=int(round(distance)),
        radius_m=effective_radius,
    )
