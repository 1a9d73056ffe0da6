from __future__ import annotations

from collections.abc import Iterable

from geo_engine.distance import within_degree_tolerance

from facility_pipeline.core.models import FacilityRecord

EXACT_TOLERANCE_DEGREES = 0.0
# ~100 m of latitude
CROSS_PROVIDER_TOLERANCE_DEGREES = 0.001


def deduplicate_by_position(
    records: Iterable[FacilityRecord],
    tolerance_degrees: float = CROSS_PROVIDER_TOLERANCE_DEGREES,
) -> list[FacilityRecord]:
    """Keep the first record of every spatial cluster, in input order.

    Every kept record is farther than ``tolerance_degrees`` from the records kept
    before it, so running the function on its own output changes nothing.
    """
    if tolerance_degrees < 0:
        raise ValueError("tolerance_degrees must be >= 0")
    kept: list[FacilityRecord] = []
    seen_exact: set[tuple[float, float]] = set()
    for record in records:
        key = (record.position.lat, record.position.lng)
        if key in seen_exact:
            continue
        if tolerance_degrees > 0 and any(
            within_degree_tolerance(record.position, existing.position, tolerance_degrees) for existing in kept
        ):
            continue
        seen_exact.add(key)
        kept.append(record)
    return kept
