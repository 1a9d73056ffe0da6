from __future__ import annotations

from facility_pipeline.core.metrics import InMemoryAggregationMetricsCollector
from facility_pipeline.core.prometheus_exporter import AggregationPrometheusExporter

aggregation_metrics = InMemoryAggregationMetricsCollector()
aggregation_exporter = AggregationPrometheusExporter()
