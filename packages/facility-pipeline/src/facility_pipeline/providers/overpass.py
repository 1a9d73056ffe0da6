from __future__ import annotations

from typing import Any

import httpx
from geo_engine.models import Coordinate

from facility_pipeline.core.exceptions import ProviderNormalizationError
from facility_pipeline.core.models import UNKNOWN_OPERATOR, FacilityRecord, FacilitySource
from facility_pipeline.providers.base import BaseFacilityProvider, pick, to_coordinate, to_str

DATA_CENTER_TAGS: tuple[tuple[str, str], ...] = (
    ("telecom", "data_center"),
    ("building", "data_center"),
    ("amenity", "data_center"),
)


def build_overpass_query(center: Coordinate, radius_meters: float, timeout_seconds: int = 25) -> str:
    around = f"(around:{int(radius_meters)},{center.lat},{center.lng})"
    selectors = "".join(
        f'{element}["{key}"="{value}"]{around};'
        for key, value in DATA_CENTER_TAGS
        for element in ("node", "way")
    )
    return f"[out:json][timeout:{timeout_seconds}];({selectors});out center tags;"


class OverpassDataCenterProvider(BaseFacilityProvider):
    """Data centers tagged in OpenStreetMap, queried through Overpass."""

    provider_name = "overpass"
    source = FacilitySource.SPATIAL_TAG
    default_radius_meters = 50_000.0

    BASE_URL = "https://overpass-api.de/api/interpreter"

    def __init__(self, base_url: str = BASE_URL, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._base_url = base_url

    async def fetch(self, client: httpx.AsyncClient, center: Coordinate, radius_meters: float) -> list[FacilityRecord]:
        payload = await self._request_json(
            client,
            self._base_url,
            method="POST",
            data={"data": build_overpass_query(center, radius_meters)},
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("elements"), list):
            raise ProviderNormalizationError("overpass payload missing list field 'elements'")

        records: list[FacilityRecord] = []
        for element in payload["elements"]:
            if not isinstance(element, dict):
                continue
            # ways carry their position in "center"
            anchor = element.get("center") if "lat" not in element else element
            coordinate = to_coordinate((anchor or {}).get("lat"), (anchor or {}).get("lon"))
            if coordinate is None:
                continue
            tags = element.get("tags") or {}
            records.append(
                FacilityRecord(
                    id=f"{to_str(element.get('type'), default='node')}/{to_str(element.get('id'))}",
                    name=to_str(tags.get("name"), default=f"Tagged Data Center {len(records) + 1}"),
                    position=coordinate,
                    source=self.source,
                    operator=to_str(pick(tags, "operator", "owner", "brand"), default=UNKNOWN_OPERATOR),
                    raw_attributes={
                        "address": _address(tags),
                        "categories": [f"{key}={tags[key]}" for key, _ in DATA_CENTER_TAGS if key in tags],
                    },
                )
            )
        return self._inside_radius(records, center, radius_meters)


def _address(tags: dict[str, Any]) -> str:
    street = " ".join(part for part in (to_str(tags.get("addr:housenumber")), to_str(tags.get("addr:street"))) if part)
    parts = (street, to_str(tags.get("addr:city")), to_str(tags.get("addr:postcode")))
    return ", ".join(part for part in parts if part)
