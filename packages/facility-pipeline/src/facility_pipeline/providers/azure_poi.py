from __future__ import annotations

import logging
from typing import Any

import httpx
from geo_engine.models import Coordinate

from facility_pipeline.core.exceptions import ProviderConfigurationError, ProviderError, ProviderNormalizationError
from facility_pipeline.core.models import UNKNOWN_OPERATOR, FacilityRecord, FacilitySource
from facility_pipeline.providers.base import BaseFacilityProvider, to_coordinate, to_str

logger = logging.getLogger(__name__)

SEARCH_TERMS: tuple[str, ...] = (
    "data center",
    "server farm",
    "technology campus",
    "computing facility",
    "AI facility",
    "machine learning",
    "cloud computing",
    "technology company",
    "tech campus",
    "digital facility",
)


class AzureMapsPoiProvider(BaseFacilityProvider):
    """Keyword POI search against Azure Maps, one request per search term."""

    provider_name = "azure_poi"
    source = FacilitySource.POI_SEARCH
    default_radius_meters = 15_000.0
    requires_relevance_filter = True

    BASE_URL = "https://atlas.microsoft.com/search/poi/json"

    def __init__(
        self,
        subscription_key: str | None,
        search_terms: tuple[str, ...] = SEARCH_TERMS,
        limit_per_term: int = 10,
        base_url: str = BASE_URL,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._subscription_key = subscription_key
        self._search_terms = search_terms
        self._limit_per_term = limit_per_term
        self._base_url = base_url

    async def fetch(self, client: httpx.AsyncClient, center: Coordinate, radius_meters: float) -> list[FacilityRecord]:
        if not self._subscription_key:
            raise ProviderConfigurationError("azure maps subscription key is not configured")

        hits: list[dict[str, Any]] = []
        last_error: ProviderError | None = None
        failed_terms = 0
        for term in self._search_terms:
            try:
                payload = await self._request_json(
                    client,
                    self._base_url,
                    params={
                        "api-version": "1.0",
                        "query": term,
                        "lat": center.lat,
                        "lon": center.lng,
                        "radius": int(radius_meters),
                        "limit": self._limit_per_term,
                        "subscription-key": self._subscription_key,
                    },
                )
                results = _results(payload)
            except ProviderError as exc:
                failed_terms += 1
                last_error = exc
                logger.warning("poi_term_failed", extra={"provider": self.provider_name, "term": term, "error": str(exc)})
                continue
            logger.debug("poi_term_completed", extra={"provider": self.provider_name, "term": term, "hit_count": len(results)})
            hits.extend(results)

        if last_error is not None and failed_terms == len(self._search_terms):
            raise last_error
        return [record for index, item in enumerate(hits, start=1) if (record := self._to_record(item, index))]

    def _to_record(self, item: dict[str, Any], index: int) -> FacilityRecord | None:
        position = item.get("position") or {}
        coordinate = to_coordinate(position.get("lat"), position.get("lon"))
        if coordinate is None:
            logger.debug("poi_hit_without_position", extra={"provider": self.provider_name, "index": index})
            return None
        poi = item.get("poi") or {}
        address = item.get("address") or {}
        brands = poi.get("brands") or []
        operator = to_str(brands[0].get("name") if brands else None, default=UNKNOWN_OPERATOR)
        categories = [to_str(category.get("name")) for category in poi.get("categorySet") or [] if category.get("name")]
        categories.extend(to_str(category) for category in poi.get("categories") or [])
        return FacilityRecord(
            id=to_str(item.get("id"), default=f"poi-{index}"),
            name=to_str(poi.get("name"), default=f"Technology Facility {index}"),
            position=coordinate,
            source=self.source,
            operator=operator,
            raw_attributes={
                "address": to_str(address.get("freeformAddress")),
                "categories": categories,
                "phone": to_str(poi.get("phone")),
            },
        )


def _results(payload: Any) -> list[dict[str, Any]]:
    if not isinstance(payload, dict):
        raise ProviderNormalizationError("azure poi payload is not a json object")
    results = payload.get("results") or []
    if not isinstance(results, list):
        raise ProviderNormalizationError("azure poi payload field 'results' is not a list")
    return [item for item in results if isinstance(item, dict)]
