from geo_engine.models import Coordinate, is_valid_coordinate

from facility_pipeline.core.fallback import sample_facilities
from facility_pipeline.core.models import FacilitySource


def test_sample_facilities_surround_center() -> None:
    records = sample_facilities(Coordinate(lat=47.62, lng=-122.35))

    assert [record.id for record in records] == ["sample-1", "sample-2", "sample-3"]
    assert all(record.source is FacilitySource.SAMPLE for record in records)
    assert records[1].position.lat == 47.62 - 0.003


def test_sample_facilities_stay_inside_coordinate_range() -> None:
    records = sample_facilities(Coordinate(lat=89.999, lng=179.999))

    assert [record.id for record in records] == ["sample-2"]
    assert all(is_valid_coordinate(record.position.lat, record.position.lng) for record in records)
