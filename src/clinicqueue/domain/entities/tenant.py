"""Tenant (clinic) domain entity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..value_objects.geo_point import GeoPoint


@dataclass
class Tenant:
    """A clinic. Owns specialists, patients and tokens.

    ``qr_active`` is the kill switch for public intake. Geofencing applies
    only when both ``geo_lat`` and ``geo_lng`` are configured.
    """

    id: str
    slug: str
    name: str
    qr_active: bool = True
    geo_lat: Optional[float] = None
    geo_lng: Optional[float] = None
    location_radius_m: Optional[float] = None
    address: Optional[str] = None

    @property
    def geofence_center(self) -> Optional[GeoPoint]:
        if self.geo_lat is None or self.geo_lng is None:
            return None
        return GeoPoint(self.geo_lat, self.geo_lng)
