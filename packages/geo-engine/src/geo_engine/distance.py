import math

from geo_engine.models import Coordinate

EARTH_RADIUS_METERS = 6_371_000
METERS_PER_MILE = 1609.344


def haversine_distance_meters(start: Coordinate, end: Coordinate) -> float:
    start_lat = math.radians(start.lat)
    end_lat = math.radians(end.lat)
    delta_lat = math.radians(end.lat - start.lat)
    delta_lng = math.radians(end.lng - start.lng)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(start_lat) * math.cos(end_lat) * math.sin(delta_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def longitude_delta(first: float, second: float) -> float:
    """Shortest longitude separation in degrees, across the antimeridian."""
    delta = abs(first - second) % 360.0
    return min(delta, 360.0 - delta)


def within_degree_tolerance(first: Coordinate, second: Coordinate, tolerance_degrees: float) -> bool:
    """Return True when both axes differ by at most ``tolerance_degrees``.

    A tolerance of 0 means exact position equality.
    """
    if tolerance_degrees < 0:
        raise ValueError("tolerance_degrees must be >= 0")
    return (
        abs(first.lat - second.lat) <= tolerance_degrees
        and longitude_delta(first.lng, second.lng) <= tolerance_degrees
    )


def meters_to_miles(meters: float) -> float:
    return meters / METERS_PER_MILE
