from __future__ import annotations

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from facility_pipeline.core.metrics import InMemoryAggregationMetricsCollector


class AggregationPrometheusExporter:
    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._stage_duration = Gauge(
            "aggregation_stage_duration_ms",
            "Latest aggregation stage duration in milliseconds",
            labelnames=("stage",),
            registry=self._registry,
        )
        self._external_errors = Gauge(
            "aggregation_external_api_errors_total",
            "External provider API error count",
            registry=self._registry,
        )
        self._published_facilities = Gauge(
            "aggregation_published_facilities",
            "Facilities published by the latest aggregation cycle",
            registry=self._registry,
        )
        self._run_total = Gauge(
            "aggregation_run_total",
            "Aggregation cycles grouped by status",
            labelnames=("status",),
            registry=self._registry,
        )
        self._provider_records_total = Gauge(
            "aggregation_provider_records_total",
            "Provider record counts grouped by provider and result",
            labelnames=("provider", "result"),
            registry=self._registry,
        )
        self._provider_errors_total = Gauge(
            "aggregation_provider_errors_total",
            "Provider failures grouped by provider and error kind",
            labelnames=("provider", "kind"),
            registry=self._registry,
        )
        self._provider_http_errors_total = Gauge(
            "aggregation_provider_http_errors_total",
            "Provider HTTP errors grouped by provider and code",
            labelnames=("provider", "code"),
            registry=self._registry,
        )
        self._provider_retries_total = Gauge(
            "aggregation_provider_retries_total",
            "Provider request retries grouped by provider",
            labelnames=("provider",),
            registry=self._registry,
        )
        self._duration_seconds = Gauge(
            "aggregation_duration_seconds",
            "Duration of the latest aggregation cycle",
            registry=self._registry,
        )

    def render(self, metrics: InMemoryAggregationMetricsCollector) -> str:
        latest_by_stage: dict[str, float] = {}
        for item in metrics.stage_durations:
            latest_by_stage[item.stage] = item.duration_ms
        for stage, duration in latest_by_stage.items():
            self._stage_duration.labels(stage=stage).set(duration)
        self._external_errors.set(metrics.external_api_error_count)
        self._published_facilities.set(metrics.published_facilities)
        for status, count in metrics.aggregation_run_total.items():
            self._run_total.labels(status=status).set(count)
        for (provider, result), count in metrics.provider_records_total.items():
            self._provider_records_total.labels(provider=provider, result=result).set(count)
        for (provider, kind), count in metrics.provider_errors_total.items():
            self._provider_errors_total.labels(provider=provider, kind=kind).set(count)
        for (provider, code), count in metrics.provider_http_errors_total.items():
            self._provider_http_errors_total.labels(provider=provider, code=code).set(count)
        for provider, count in metrics.provider_retries_total.items():
            self._provider_retries_total.labels(provider=provider).set(count)
        if metrics.aggregation_duration_seconds is not None:
            self._duration_seconds.set(metrics.aggregation_duration_seconds)
        return generate_latest(self._registry).decode("utf-8")
