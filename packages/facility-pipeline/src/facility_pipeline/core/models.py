from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from geo_engine.models import Coordinate

UNKNOWN_OPERATOR = "Unknown Operator"


class FacilitySource(str, Enum):
    POI_SEARCH = "poi_search"
    FACILITY_REGISTRY = "facility_registry"
    SPATIAL_TAG = "spatial_tag"
    COMPLIANCE_REGISTRY = "compliance_registry"
    SAMPLE = "sample"


class ImpactCategory(str, Enum):
    HIGH_HEAT = "HIGH HEAT"
    NOISE = "NOISE"
    HEAT_NOISE = "HEAT + NOISE"
    EMISSIONS = "EMISSIONS"
    LOW_IMPACT = "LOW IMPACT"


@dataclass(frozen=True)
class FacilityRecord:
    id: str
    name: str
    position: Coordinate
    source: FacilitySource
    operator: str = UNKNOWN_OPERATOR
    raw_attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def violation_count(self) -> int | None:
        value = self.raw_attributes.get("violation_count")
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


@dataclass(frozen=True)
class AggregatedFacility:
    record: FacilityRecord
    impact_category: ImpactCategory
    impact_score: int

    @property
    def id(self) -> str:
        return self.record.id

    @property
    def name(self) -> str:
        return self.record.name

    @property
    def position(self) -> Coordinate:
        return self.record.position

    @property
    def operator(self) -> str:
        return self.record.operator

    @property
    def source(self) -> FacilitySource:
        return self.record.source

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "lat": self.position.lat,
            "lng": self.position.lng,
            "operator": self.operator,
            "source": self.source.value,
            "impact": self.impact_category.value,
            "impact_score": self.impact_score,
            "attributes": dict(self.record.raw_attributes),
        }

