from __future__ import annotations

from typing import Any

import httpx
from geo_engine.distance import meters_to_miles
from geo_engine.models import Coordinate

from facility_pipeline.core.exceptions import ProviderNormalizationError
from facility_pipeline.core.models import UNKNOWN_OPERATOR, FacilityRecord, FacilitySource
from facility_pipeline.providers.base import BaseFacilityProvider, pick, to_coordinate, to_str

# NAICS 518210: computing infrastructure, data processing and web hosting
DATA_PROCESSING_NAICS = "518210"
MAX_RADIUS_MILES = 100.0


def _to_violation_count(value: Any) -> int:
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError):
        return 0


class EpaEchoProvider(BaseFacilityProvider):
    """Air-permitted facilities from EPA ECHO with compliance history."""

    provider_name = "epa_echo"
    source = FacilitySource.COMPLIANCE_REGISTRY
    default_radius_meters = 50_000.0

    BASE_URL = "https://echodata.epa.gov/echo/air_rest_services.get_facility_info"

    def __init__(self, base_url: str = BASE_URL, naics_code: str = DATA_PROCESSING_NAICS, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._base_url = base_url
        self._naics_code = naics_code

    async def fetch(self, client: httpx.AsyncClient, center: Coordinate, radius_meters: float) -> list[FacilityRecord]:
        radius_miles = min(MAX_RADIUS_MILES, meters_to_miles(radius_meters))
        payload = await self._request_json(
            client,
            self._base_url,
            params={
                "output": "JSON",
                "p_lat": center.lat,
                "p_long": center.lng,
                "p_radius": round(radius_miles, 2),
                "p_ncs": self._naics_code,
            },
        )
        results = payload.get("Results") if isinstance(payload, dict) else None
        if not isinstance(results, dict):
            raise ProviderNormalizationError("echo payload missing object field 'Results'")
        facilities = results.get("Facilities") or []
        if not isinstance(facilities, list):
            raise ProviderNormalizationError("echo payload field 'Facilities' is not a list")

        records: list[FacilityRecord] = []
        for item in facilities:
            if not isinstance(item, dict):
                continue
            coordinate = to_coordinate(pick(item, "FacLat", "Lat"), pick(item, "FacLong", "Lon"))
            if coordinate is None:
                continue
            registry_id = to_str(pick(item, "RegistryID", "AIRIDs", "SourceID"), default=str(len(records) + 1))
            address = ", ".join(
                part
                for part in (
                    to_str(pick(item, "AIRStreet", "FacStreet")),
                    to_str(pick(item, "AIRCity", "FacCity")),
                    to_str(pick(item, "AIRState", "FacState")),
                )
                if part
            )
            records.append(
                FacilityRecord(
                    id=f"echo-{registry_id}",
                    name=to_str(pick(item, "AIRName", "FacName"), default=f"Permitted Facility {len(records) + 1}"),
                    position=coordinate,
                    source=self.source,
                    operator=to_str(pick(item, "FacOwner", "AIROwner"), default=UNKNOWN_OPERATOR),
                    raw_attributes={
                        "address": address,
                        "violation_count": _to_violation_count(pick(item, "AIRQtrsWithViol", "FacQtrsWithNC", "Viol")),
                        "inspection_date": to_str(pick(item, "AIRLastInspectionDate", "FacDateLastInspection")),
                    },
                )
            )
        return self._inside_radius(records, center, radius_meters)
