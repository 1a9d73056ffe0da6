import pytest
from geo_engine.models import Coordinate

from facility_pipeline.core.dedup import deduplicate_by_position
from facility_pipeline.core.models import FacilityRecord, FacilitySource


def _record(record_id: str, lat: float, lng: float) -> FacilityRecord:
    return FacilityRecord(
        id=record_id,
        name=record_id,
        position=Coordinate(lat=lat, lng=lng),
        source=FacilitySource.SPATIAL_TAG,
    )


def test_exact_dedup_only_drops_identical_positions() -> None:
    records = [_record("a", 47.62, -122.35), _record("b", 47.62, -122.35), _record("c", 47.6201, -122.35)]

    assert [record.id for record in deduplicate_by_position(records, tolerance_degrees=0)] == ["a", "c"]


def test_tolerance_dedup_keeps_first_seen() -> None:
    records = [
        _record("a", 47.6205, -122.3501),
        _record("b", 47.6206, -122.3502),
        _record("c", 47.6300, -122.3501),
    ]

    assert [record.id for record in deduplicate_by_position(records)] == ["a", "c"]


def test_dedup_is_idempotent_on_chained_clusters() -> None:
    records = [
        _record("a", 47.6200, -122.35),
        _record("b", 47.6209, -122.35),
        _record("c", 47.6218, -122.35),
        _record("d", 47.6227, -122.35),
    ]

    once = deduplicate_by_position(records, tolerance_degrees=0.001)
    twice = deduplicate_by_position(once, tolerance_degrees=0.001)

    assert [record.id for record in once] == ["a", "c"]
    assert twice == once


def test_dedup_rejects_negative_tolerance() -> None:
    with pytest.raises(ValueError):
        deduplicate_by_position([], tolerance_degrees=-0.1)


def test_tolerance_dedup_merges_across_antimeridian() -> None:
    records = [_record("east", -17.7, 179.9999), _record("west", -17.7, -179.9999)]

    assert [record.id for record in deduplicate_by_position(records)] == ["east"]
