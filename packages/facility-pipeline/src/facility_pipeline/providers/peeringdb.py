from __future__ import annotations

from typing import Any

import httpx
from geo_engine.models import BoundingBox, Coordinate

from facility_pipeline.core.exceptions import ProviderNormalizationError
from facility_pipeline.core.models import UNKNOWN_OPERATOR, FacilityRecord, FacilitySource
from facility_pipeline.providers.base import BaseFacilityProvider, pick, to_coordinate, to_str

BOUNDING_BOX_DELTA_DEGREES = 0.5


class PeeringDbFacilityProvider(BaseFacilityProvider):
    """Interconnection facilities registered with PeeringDB.

    The registry is queried with a fixed bounding box around the center; the
    radius argument is not used.
    """

    provider_name = "peeringdb"
    source = FacilitySource.FACILITY_REGISTRY

    BASE_URL = "https://www.peeringdb.com/api/fac"

    def __init__(
        self,
        base_url: str = BASE_URL,
        api_key: str | None = None,
        delta_degrees: float = BOUNDING_BOX_DELTA_DEGREES,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._base_url = base_url
        self._api_key = api_key
        self._delta_degrees = delta_degrees

    def _default_client(self) -> httpx.AsyncClient:
        headers = {"User-Agent": self._user_agent}
        if self._api_key:
            headers["Authorization"] = f"Api-Key {self._api_key}"
        return httpx.AsyncClient(timeout=self._timeout, headers=headers)

    async def fetch(self, client: httpx.AsyncClient, center: Coordinate, radius_meters: float) -> list[FacilityRecord]:
        box = BoundingBox.around(center, self._delta_degrees)
        payload = await self._request_json(
            client,
            self._base_url,
            params={
                "latitude__gte": box.south,
                "latitude__lte": box.north,
                "longitude__gte": box.west,
                "longitude__lte": box.east,
                "status": "ok",
            },
        )
        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise ProviderNormalizationError("peeringdb payload missing list field 'data'")

        records: list[FacilityRecord] = []
        for item in payload["data"]:
            if not isinstance(item, dict):
                raise ProviderNormalizationError("peeringdb data item is not an object")
            coordinate = to_coordinate(item.get("latitude"), item.get("longitude"))
            if coordinate is None:
                continue
            facility_id = to_str(item.get("id"))
            address = ", ".join(
                part for part in (to_str(pick(item, "address1")), to_str(item.get("city")), to_str(item.get("country"))) if part
            )
            records.append(
                FacilityRecord(
                    id=f"fac-{facility_id}" if facility_id else f"fac-{len(records) + 1}",
                    name=to_str(item.get("name"), default=f"Registered Facility {len(records) + 1}"),
                    position=coordinate,
                    source=self.source,
                    operator=to_str(pick(item, "org_name", "owner"), default=UNKNOWN_OPERATOR),
                    raw_attributes={
                        "address": address,
                        "website": to_str(item.get("website")),
                        "network_count": item.get("net_count"),
                    },
                )
            )
        return records
