"""Geo engine core package."""

from geo_engine.distance import haversine_distance_meters, longitude_delta, meters_to_miles, within_degree_tolerance
from geo_engine.geofence import is_point_inside_radius
from geo_engine.models import BoundingBox, Coordinate, is_valid_coordinate

__all__ = [
    "BoundingBox",
    "Coordinate",
    "haversine_distance_meters",
    "is_point_inside_radius",
    "is_valid_coordinate",
    "longitude_delta",
    "meters_to_miles",
    "within_degree_tolerance",
]
