from __future__ import annotations

from collections.abc import Callable

import httpx

from facility_pipeline.config import AggregationSettings
from facility_pipeline.core.metrics import InMemoryAggregationMetricsCollector
from facility_pipeline.providers.azure_poi import AzureMapsPoiProvider
from facility_pipeline.providers.base import BaseFacilityProvider
from facility_pipeline.providers.epa_echo import EpaEchoProvider
from facility_pipeline.providers.overpass import OverpassDataCenterProvider
from facility_pipeline.providers.peeringdb import PeeringDbFacilityProvider

ProviderBuilder = Callable[[AggregationSettings, dict], BaseFacilityProvider]

_BUILDERS: dict[str, ProviderBuilder] = {
    "azure_poi": lambda settings, common: AzureMapsPoiProvider(
        subscription_key=settings.AZURE_MAPS_KEY,
        base_url=settings.AZURE_POI_BASE_URL,
        radius_meters=settings.AZURE_POI_RADIUS_METERS,
        **common,
    ),
    "peeringdb": lambda settings, common: PeeringDbFacilityProvider(
        base_url=settings.PEERINGDB_BASE_URL,
        api_key=settings.PEERINGDB_API_KEY,
        **common,
    ),
    "overpass": lambda settings, common: OverpassDataCenterProvider(
        base_url=settings.OVERPASS_BASE_URL,
        radius_meters=settings.OVERPASS_RADIUS_METERS,
        **common,
    ),
    "epa_echo": lambda settings, common: EpaEchoProvider(
        base_url=settings.EPA_ECHO_BASE_URL,
        radius_meters=settings.EPA_ECHO_RADIUS_METERS,
        **common,
    ),
}


def supported_providers() -> list[str]:
    return sorted(_BUILDERS.keys())


def build_provider(
    provider_name: str,
    settings: AggregationSettings,
    metrics: InMemoryAggregationMetricsCollector | None = None,
    client_factory: Callable[[], httpx.AsyncClient] | None = None,
) -> BaseFacilityProvider:
    builder = _BUILDERS.get(provider_name)
    if builder is None:
        supported = ", ".join(supported_providers())
        raise ValueError(f"unsupported provider '{provider_name}', supported: {supported}")
    common = {
        "connect_timeout_seconds": settings.PROVIDER_CONNECT_TIMEOUT_SECONDS,
        "read_timeout_seconds": settings.PROVIDER_READ_TIMEOUT_SECONDS,
        "max_retries": settings.PROVIDER_MAX_RETRIES,
        "retry_base_delay_seconds": settings.PROVIDER_RETRY_BASE_DELAY_SECONDS,
        "user_agent": settings.HTTP_USER_AGENT,
        "metrics": metrics,
        "client_factory": client_factory,
    }
    return builder(settings, common)


def build_providers(
    settings: AggregationSettings,
    metrics: InMemoryAggregationMetricsCollector | None = None,
    client_factory: Callable[[], httpx.AsyncClient] | None = None,
) -> list[BaseFacilityProvider]:
    return [
        build_provider(name, settings, metrics=metrics, client_factory=client_factory)
        for name in settings.provider_names
    ]
