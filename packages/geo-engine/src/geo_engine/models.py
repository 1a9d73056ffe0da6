from __future__ import annotations

from dataclasses import dataclass

MIN_LAT = -90.0
MAX_LAT = 90.0
MIN_LNG = -180.0
MAX_LNG = 180.0


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    @classmethod
    def validated(cls, lat: float, lng: float) -> Coordinate:
        lat = float(lat)
        lng = float(lng)
        if not (MIN_LAT <= lat <= MAX_LAT):
            raise ValueError(f"lat must be between {MIN_LAT} and {MAX_LAT}, got {lat}")
        if not (MIN_LNG <= lng <= MAX_LNG):
            raise ValueError(f"lng must be between {MIN_LNG} and {MAX_LNG}, got {lng}")
        return cls(lat=lat, lng=lng)

    def offset(self, delta_lat: float, delta_lng: float) -> Coordinate:
        return Coordinate(lat=self.lat + delta_lat, lng=self.lng + delta_lng)


def is_valid_coordinate(lat: float, lng: float) -> bool:
    return MIN_LAT <= lat <= MAX_LAT and MIN_LNG <= lng <= MAX_LNG


@dataclass(frozen=True)
class BoundingBox:
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def around(cls, center: Coordinate, delta_degrees: float) -> BoundingBox:
        if delta_degrees < 0:
            raise ValueError("delta_degrees must be >= 0")
        return cls(
            south=max(MIN_LAT, center.lat - delta_degrees),
            west=max(MIN_LNG, center.lng - delta_degrees),
            north=min(MAX_LAT, center.lat + delta_degrees),
            east=min(MAX_LNG, center.lng + delta_degrees),
        )

    @classmethod
    def from_points(cls, points: list[Coordinate]) -> BoundingBox:
        if not points:
            raise ValueError("points must not be empty")
        return cls(
            south=min(point.lat for point in points),
            west=min(point.lng for point in points),
            north=max(point.lat for point in points),
            east=max(point.lng for point in points),
        )
