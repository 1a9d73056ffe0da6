from __future__ import annotations

from fastapi import FastAPI, Response

from facility_pipeline.core.metrics import InMemoryAggregationMetricsCollector
from facility_pipeline.core.prometheus_exporter import AggregationPrometheusExporter
from facility_pipeline.monitoring.state import aggregation_exporter, aggregation_metrics


def create_monitoring_app(
    metrics: InMemoryAggregationMetricsCollector | None = None,
    exporter: AggregationPrometheusExporter | None = None,
) -> FastAPI:
    app = FastAPI(title="Facility Aggregation Monitoring", version="0.1.0")
    collector = metrics or aggregation_metrics
    renderer = exporter or aggregation_exporter

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/readyz")
    async def readyz() -> dict[str, str]:
        return {"status": "ready"}

    @app.get("/metrics")
    async def metrics_endpoint() -> Response:
        body = renderer.render(collector)
        return Response(content=body, media_type="text/plain; version=0.0.4")

    return app


app = create_monitoring_app()
