from __future__ import annotations

from facility_pipeline.core.models import AggregatedFacility, FacilityRecord, FacilitySource, ImpactCategory

EMISSIONS_VIOLATION_THRESHOLD = 3
COMPLIANCE_BASE_SCORE = 4
MAX_IMPACT_SCORE = 10

_FIXED_IMPACT: dict[FacilitySource, tuple[ImpactCategory, int]] = {
    # registry listings are carrier-grade network infrastructure
    FacilitySource.FACILITY_REGISTRY: (ImpactCategory.HIGH_HEAT, 8),
    FacilitySource.POI_SEARCH: (ImpactCategory.HEAT_NOISE, 6),
    FacilitySource.SPATIAL_TAG: (ImpactCategory.NOISE, 5),
    FacilitySource.SAMPLE: (ImpactCategory.LOW_IMPACT, 1),
}


def classify_impact(source: FacilitySource, violation_count: int | None = None) -> tuple[ImpactCategory, int]:
    if source is FacilitySource.COMPLIANCE_REGISTRY:
        violations = max(0, violation_count or 0)
        score = min(MAX_IMPACT_SCORE, COMPLIANCE_BASE_SCORE + violations)
        if violations >= EMISSIONS_VIOLATION_THRESHOLD:
            return ImpactCategory.EMISSIONS, score
        return ImpactCategory.HEAT_NOISE, score
    return _FIXED_IMPACT[source]


def score_facility(record: FacilityRecord) -> AggregatedFacility:
    category, score = classify_impact(record.source, record.violation_count)
    return AggregatedFacility(record=record, impact_category=category, impact_score=score)
