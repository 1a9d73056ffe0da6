from __future__ import annotations

from geo_engine.models import Coordinate, is_valid_coordinate

from facility_pipeline.core.models import FacilityRecord, FacilitySource

# (id, name, operator, description, delta_lat, delta_lng)
_SAMPLE_FACILITIES: tuple[tuple[str, str, str, str, float, float], ...] = (
    (
        "sample-1",
        "AI Training Facility",
        "AI Research Corp",
        "Large-scale AI model training facility with high GPU usage",
        0.005,
        0.005,
    ),
    (
        "sample-2",
        "Machine Learning Data Center",
        "ML Computing Inc",
        "Intensive computing for machine learning workloads",
        -0.003,
        -0.003,
    ),
    (
        "sample-3",
        "Cloud AI Facility",
        "Cloud AI Services",
        "Cloud-based AI processing center with high energy consumption",
        0.002,
        -0.004,
    ),
)


def sample_facilities(center: Coordinate) -> list[FacilityRecord]:
    """Illustrative facilities placed around ``center`` for demo sessions.

    Offsets that would leave the valid coordinate range are skipped.
    """
    records: list[FacilityRecord] = []
    for sample_id, name, operator, description, delta_lat, delta_lng in _SAMPLE_FACILITIES:
        position = center.offset(delta_lat, delta_lng)
        if not is_valid_coordinate(position.lat, position.lng):
            continue
        records.append(
            FacilityRecord(
                id=sample_id,
                name=name,
                position=position,
                source=FacilitySource.SAMPLE,
                operator=operator,
                raw_attributes={"description": description, "sample": True},
            )
        )
    return records
