"""
Geofence distance and acceptance tests.
"""

import pytest

from clinicqueue.domain.entities import Tenant
from clinicqueue.domain.services import geofence
from clinicqueue.domain.value_objects import GeoPoint

from conftest import CLINIC_LAT, CLINIC_LNG

CLINIC = GeoPoint(CLINIC_LAT, CLINIC_LNG)


def test_distance_to_self_is_zero():
    assert geofence.distance_meters(CLINIC, CLINIC) == 0


def test_distance_along_meridian_matches_haversine():
    # 0.009 degrees of latitude is roughly one kilometre
    far = GeoPoint(CLINIC_LAT + 0.009, CLINIC_LNG)
    distance = geofence.distance_meters(CLINIC, far)
    assert distance == pytest.approx(1000, rel=0.05)


def test_point_at_clinic_is_accepted():
    result = geofence.validate(CLINIC, 100, CLINIC)
    assert result.accepted
    assert result.distance_m == 0
    assert not result.skipped


def test_point_one_kilometre_away_is_rejected():
    result = geofence.validate(CLINIC, 100, GeoPoint(28.6229, CLINIC_LNG))
    assert not result.accepted
    assert 950 <= result.distance_m <= 1050
    assert result.radius_m == 100


def test_missing_radius_uses_default():
    nearby = GeoPoint(CLINIC_LAT + 0.0005, CLINIC_LNG)  # ~56 m
    assert geofence.validate(CLINIC, None, nearby, default_radius_m=100).accepted
    assert geofence.validate(CLINIC, 0, nearby, default_radius_m=100).accepted
    assert not geofence.validate(CLINIC, None, nearby, default_radius_m=20).accepted


def test_no_center_skips_check():
    result = geofence.validate(None, 100, GeoPoint(-33.8688, 151.2093))
    assert result.accepted
    assert result.skipped
    assert result.distance_m is None


def test_zero_coordinates_are_a_real_center():
    tenant = Tenant(id="t", slug="null-island", name="Null Island", geo_lat=0.0, geo_lng=0.0)
    assert tenant.geofence_center == GeoPoint(0.0, 0.0)

    result = geofence.validate(tenant.geofence_center, 100, GeoPoint(CLINIC_LAT, CLINIC_LNG))
    assert not result.skipped
    assert not result.accepted


def test_half_configured_center_is_not_geofenced():
    tenant = Tenant(id="t", slug="half", name="Half", geo_lat=CLINIC_LAT, geo_lng=None)
    assert tenant.geofence_center is None


def test_geo_point_rejects_out_of_range():
    with pytest.raises(ValueError):
        GeoPoint(91, 0)
    with pytest.raises(ValueError):
        GeoPoint(0, 181)
