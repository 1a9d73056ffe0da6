from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from time import perf_counter
from typing import Callable, TypeVar

from geo_engine.models import Coordinate
from opentelemetry import trace

from facility_pipeline.core.dedup import CROSS_PROVIDER_TOLERANCE_DEGREES, deduplicate_by_position
from facility_pipeline.core.fallback import sample_facilities
from facility_pipeline.core.impact import score_facility
from facility_pipeline.core.metrics import InMemoryAggregationMetricsCollector
from facility_pipeline.core.models import AggregatedFacility, FacilityRecord
from facility_pipeline.core.relevance import FacilityRelevanceFilter
from facility_pipeline.providers.base import BaseFacilityProvider, ProviderResult

R = TypeVar("R")
logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(frozen=True)
class AggregationReport:
    center: Coordinate
    facilities: list[AggregatedFacility]
    provider_results: list[ProviderResult] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def all_failed(self) -> bool:
        return bool(self.provider_results) and all(result.failed for result in self.provider_results)

    @property
    def status(self) -> str:
        if self.all_failed:
            return "failed"
        if any(result.failed for result in self.provider_results):
            return "partial"
        if not self.facilities:
            return "empty"
        return "success"


class FacilityAggregator:
    """Fans a location out to every provider and merges the answers.

    Providers run concurrently; the merge waits for all of them. A provider
    that fails or exceeds ``provider_timeout_seconds`` contributes nothing.
    """

    def __init__(
        self,
        providers: Sequence[BaseFacilityProvider],
        relevance_filter: FacilityRelevanceFilter | None = None,
        dedup_tolerance_degrees: float = CROSS_PROVIDER_TOLERANCE_DEGREES,
        max_results: int | None = None,
        enable_sample_fallback: bool = False,
        provider_timeout_seconds: float = 30.0,
        metrics: InMemoryAggregationMetricsCollector | None = None,
    ) -> None:
        if max_results is not None and max_results <= 0:
            raise ValueError("max_results must be > 0")
        if dedup_tolerance_degrees < 0:
            raise ValueError("dedup_tolerance_degrees must be >= 0")
        if provider_timeout_seconds <= 0:
            raise ValueError("provider_timeout_seconds must be > 0")
        self._providers = list(providers)
        self._relevance_filter = relevance_filter or FacilityRelevanceFilter()
        self._dedup_tolerance_degrees = dedup_tolerance_degrees
        self._max_results = max_results
        self._enable_sample_fallback = enable_sample_fallback
        self._provider_timeout_seconds = provider_timeout_seconds
        self._metrics = metrics

    async def aggregate(self, center: Coordinate) -> list[AggregatedFacility]:
        report = await self.aggregate_with_report(center)
        return report.facilities

    async def aggregate_with_report(self, center: Coordinate) -> AggregationReport:
        logger.info(
            "aggregation_started",
            extra={"component": "facility_pipeline", "lat": center.lat, "lng": center.lng, "provider_count": len(self._providers)},
        )
        total_started = perf_counter()
        with tracer.start_as_current_span("facility_aggregation") as span:
            span.set_attribute("aggregation.provider_count", len(self._providers))
            try:
                report = await self._run(center)
            except Exception:
                logger.exception("aggregation_crashed", extra={"component": "facility_pipeline"})
                report = AggregationReport(center=center, facilities=[])
            span.set_attribute("aggregation.status", report.status)
            span.set_attribute("aggregation.facility_count", len(report.facilities))

        duration_seconds = perf_counter() - total_started
        if self._metrics:
            self._metrics.increment_run(report.status)
            self._metrics.set_published_facilities(len(report.facilities))
            self._metrics.observe_aggregation_duration(duration_seconds)
        logger.info(
            "aggregation_completed",
            extra={
                "component": "facility_pipeline",
                "status": report.status,
                "facility_count": len(report.facilities),
                "used_fallback": report.used_fallback,
                "duration_seconds": round(duration_seconds, 3),
            },
        )
        return report

    async def _run(self, center: Coordinate) -> AggregationReport:
        started = perf_counter()
        results = await asyncio.gather(*(self._collect(provider, center) for provider in self._providers))
        self._observe("collect", (perf_counter() - started) * 1000.0)

        merged = self._time_sync("filter", lambda: self._merge(results))
        unique = self._time_sync(
            "deduplicate",
            lambda: deduplicate_by_position(merged, tolerance_degrees=self._dedup_tolerance_degrees),
        )
        report = AggregationReport(center=center, facilities=[], provider_results=list(results))
        used_fallback = False
        if not unique and report.all_failed and self._enable_sample_fallback:
            logger.warning("aggregation_using_sample_fallback", extra={"component": "facility_pipeline"})
            unique = sample_facilities(center)
            used_fallback = True

        scored = self._time_sync("score", lambda: [score_facility(record) for record in unique])
        if self._max_results is not None:
            scored = scored[: self._max_results]
        return AggregationReport(
            center=center,
            facilities=scored,
            provider_results=list(results),
            used_fallback=used_fallback,
        )

    async def _collect(self, provider: BaseFacilityProvider, center: Coordinate) -> ProviderResult:
        try:
            return await asyncio.wait_for(
                provider.collect(center, provider.radius_meters),
                timeout=self._provider_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "provider_call_timed_out",
                extra={"provider": provider.provider_name, "timeout_seconds": self._provider_timeout_seconds},
            )
            if self._metrics:
                self._metrics.increment_provider_error(provider.provider_name, "timeout")
            return ProviderResult(provider=provider.provider_name, error_kind="timeout", error_message="provider call timed out")
        except Exception as exc:
            logger.exception("provider_call_crashed", extra={"provider": provider.provider_name})
            if self._metrics:
                self._metrics.increment_provider_error(provider.provider_name, "unexpected")
            return ProviderResult(provider=provider.provider_name, error_kind="unexpected", error_message=str(exc))

    def _merge(self, results: Sequence[ProviderResult]) -> list[FacilityRecord]:
        relevant_by_provider = {
            provider.provider_name: provider.requires_relevance_filter for provider in self._providers
        }
        merged: list[FacilityRecord] = []
        for result in results:
            records = result.records
            if relevant_by_provider.get(result.provider, False):
                relevance = self._relevance_filter.filter(records)
                if relevance.rejected_count:
                    logger.info(
                        "provider_records_filtered",
                        extra={
                            "provider": result.provider,
                            "rejected_count": relevance.rejected_count,
                            "rejected_samples": relevance.rejected_names,
                        },
                    )
                records = relevance.accepted
            if self._metrics:
                self._metrics.add_provider_records(result.provider, "relevant", len(records))
            merged.extend(records)
        return merged

    def _time_sync(self, stage: str, action: Callable[[], R]) -> R:
        started = perf_counter()
        result = action()
        self._observe(stage, (perf_counter() - started) * 1000.0)
        return result

    def _observe(self, stage: str, duration_ms: float) -> None:
        if self._metrics:
            self._metrics.observe_stage_duration(stage, duration_ms)
