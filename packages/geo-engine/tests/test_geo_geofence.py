import pytest

from geo_engine.geofence import is_point_inside_radius
from geo_engine.models import Coordinate


def test_point_inside_radius() -> None:
    center = Coordinate(lat=47.6205, lng=-122.3493)
    nearby = Coordinate(lat=47.6209, lng=-122.3497)
    assert is_point_inside_radius(center, nearby, radius_meters=100)


def test_point_outside_radius() -> None:
    center = Coordinate(lat=47.6205, lng=-122.3493)
    far = Coordinate(lat=47.4502, lng=-122.3088)
    assert not is_point_inside_radius(center, far, radius_meters=100)


def test_negative_radius_raises() -> None:
    center = Coordinate(lat=47.6205, lng=-122.3493)
    with pytest.raises(ValueError):
        is_point_inside_radius(center, center, radius_meters=-1)
