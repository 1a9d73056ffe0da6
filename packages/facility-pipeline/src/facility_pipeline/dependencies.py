from __future__ import annotations

from collections.abc import Callable

import httpx

from facility_pipeline.config import AggregationSettings, load_settings
from facility_pipeline.core.metrics import InMemoryAggregationMetricsCollector
from facility_pipeline.core.pipeline import FacilityAggregator
from facility_pipeline.providers.factory import build_providers


def build_aggregator(
    settings: AggregationSettings | None = None,
    metrics: InMemoryAggregationMetricsCollector | None = None,
    client_factory: Callable[[], httpx.AsyncClient] | None = None,
) -> FacilityAggregator:
    settings = settings or load_settings()
    providers = build_providers(settings, metrics=metrics, client_factory=client_factory)
    return FacilityAggregator(
        providers=providers,
        dedup_tolerance_degrees=settings.DEDUP_TOLERANCE_DEGREES,
        max_results=settings.MAX_RESULTS,
        enable_sample_fallback=settings.ENABLE_SAMPLE_FALLBACK,
        provider_timeout_seconds=settings.PROVIDER_TIMEOUT_SECONDS,
        metrics=metrics,
    )
