from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
from geo_engine.geofence import is_point_inside_radius
from geo_engine.models import Coordinate, is_valid_coordinate

from facility_pipeline.config import DEFAULT_USER_AGENT
from facility_pipeline.core.dedup import EXACT_TOLERANCE_DEGREES, deduplicate_by_position
from facility_pipeline.core.exceptions import (
    ProviderError,
    ProviderNormalizationError,
    ProviderRequestError,
    ProviderTemporaryError,
)
from facility_pipeline.core.metrics import InMemoryAggregationMetricsCollector
from facility_pipeline.core.models import FacilityRecord, FacilitySource
from facility_pipeline.core.retry import with_exponential_backoff

logger = logging.getLogger(__name__)


def pick(item: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in item and item[key] not in (None, ""):
            return item[key]
    return None


def to_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def to_coordinate(lat: Any, lng: Any) -> Coordinate | None:
    try:
        lat_value = float(lat)
        lng_value = float(lng)
    except (TypeError, ValueError):
        return None
    if not is_valid_coordinate(lat_value, lng_value):
        return None
    return Coordinate(lat=lat_value, lng=lng_value)


@dataclass(frozen=True)
class ProviderResult:
    provider: str
    records: list[FacilityRecord] = field(default_factory=list)
    error_kind: str | None = None
    error_message: str | None = None

    @property
    def failed(self) -> bool:
        return self.error_kind is not None


class BaseFacilityProvider(ABC):
    """One external facility data source.

    ``search`` and ``collect`` never raise: transport, status and payload
    problems are logged and turned into an empty result.
    """

    provider_name: str
    source: FacilitySource
    default_radius_meters: float = 50_000.0
    requires_relevance_filter = False

    def __init__(
        self,
        radius_meters: float | None = None,
        connect_timeout_seconds: float = 2.0,
        read_timeout_seconds: float = 5.0,
        max_retries: int = 3,
        retry_base_delay_seconds: float = 0.1,
        user_agent: str = DEFAULT_USER_AGENT,
        metrics: InMemoryAggregationMetricsCollector | None = None,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self.radius_meters = self.default_radius_meters if radius_meters is None else radius_meters
        if self.radius_meters <= 0:
            raise ValueError("radius_meters must be > 0")
        self._timeout = httpx.Timeout(
            connect=connect_timeout_seconds,
            read=read_timeout_seconds,
            write=read_timeout_seconds,
            pool=connect_timeout_seconds,
        )
        self._max_retries = max_retries
        self._retry_base_delay_seconds = retry_base_delay_seconds
        self._user_agent = user_agent
        self._metrics = metrics
        self._client_factory = client_factory

    async def search(self, center: Coordinate, radius_meters: float | None = None) -> list[FacilityRecord]:
        result = await self.collect(center, radius_meters)
        return result.records

    async def collect(self, center: Coordinate, radius_meters: float | None = None) -> ProviderResult:
        radius = self.radius_meters if radius_meters is None else radius_meters
        logger.info(
            "provider_search_started",
            extra={"provider": self.provider_name, "lat": center.lat, "lng": center.lng, "radius_meters": radius},
        )
        try:
            factory = self._client_factory or self._default_client
            async with factory() as client:
                records = await self.fetch(client, center, radius)
        except ProviderError as exc:
            return self._failure(exc.kind, str(exc))
        except Exception as exc:
            logger.exception("provider_search_crashed", extra={"provider": self.provider_name})
            return self._failure("unexpected", str(exc))

        unique = deduplicate_by_position(records, tolerance_degrees=EXACT_TOLERANCE_DEGREES)
        if self._metrics:
            self._metrics.add_provider_records(self.provider_name, "fetched", len(unique))
        logger.info(
            "provider_search_completed",
            extra={"provider": self.provider_name, "record_count": len(unique), "duplicate_count": len(records) - len(unique)},
        )
        return ProviderResult(provider=self.provider_name, records=unique)

    @abstractmethod
    async def fetch(self, client: httpx.AsyncClient, center: Coordinate, radius_meters: float) -> list[FacilityRecord]:
        raise NotImplementedError

    def _inside_radius(
        self, records: list[FacilityRecord], center: Coordinate, radius_meters: float
    ) -> list[FacilityRecord]:
        inside = [record for record in records if is_point_inside_radius(center, record.position, radius_meters)]
        if len(inside) < len(records):
            logger.debug(
                "provider_records_outside_radius",
                extra={"provider": self.provider_name, "dropped_count": len(records) - len(inside)},
            )
        return inside

    def _default_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, headers={"User-Agent": self._user_agent})

    def _failure(self, kind: str, message: str) -> ProviderResult:
        logger.warning(
            "provider_search_failed",
            extra={"provider": self.provider_name, "error_kind": kind, "error": message},
        )
        if self._metrics:
            self._metrics.increment_provider_error(self.provider_name, kind)
        return ProviderResult(provider=self.provider_name, error_kind=kind, error_message=message)

    async def _request_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> Any:
        async def _request_once() -> Any:
            try:
                response = await client.request(method, url, params=params, data=data)
            except httpx.TimeoutException as exc:
                raise ProviderTemporaryError(f"{self.provider_name} timeout") from exc
            except httpx.HTTPError as exc:
                raise ProviderRequestError(f"{self.provider_name} request error: {exc}") from exc

            if response.status_code == 429 or response.status_code >= 500:
                self._count_http_error(response.status_code)
                raise ProviderTemporaryError(
                    f"{self.provider_name} temporary error: status={response.status_code}"
                )
            if response.status_code >= 400:
                self._count_http_error(response.status_code)
                raise ProviderRequestError(f"{self.provider_name} request rejected: status={response.status_code}")
            try:
                return response.json()
            except ValueError as exc:
                raise ProviderNormalizationError(f"{self.provider_name} returned invalid json") from exc

        return await with_exponential_backoff(
            _request_once,
            retries=self._max_retries,
            base_delay_seconds=self._retry_base_delay_seconds,
            should_retry=lambda exc: isinstance(exc, ProviderTemporaryError),
            on_retry=self._on_retry,
        )

    def _count_http_error(self, status_code: int) -> None:
        if self._metrics:
            self._metrics.increment_provider_http_error(self.provider_name, status_code)

    def _on_retry(self, _: int, __: float) -> None:
        if not self._metrics:
            return
        self._metrics.increment_external_api_error()
        self._metrics.increment_provider_retry(self.provider_name)
