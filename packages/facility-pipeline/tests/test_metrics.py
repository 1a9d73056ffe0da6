from facility_pipeline.core.metrics import InMemoryAggregationMetricsCollector


def test_metrics_collector_accumulates_counters() -> None:
    metrics = InMemoryAggregationMetricsCollector()

    metrics.increment_run("success")
    metrics.increment_run("success")
    metrics.add_provider_records("peeringdb", "fetched", 4)
    metrics.add_provider_records("peeringdb", "fetched", 0)
    metrics.increment_provider_error("overpass", "timeout")
    metrics.increment_provider_http_error("overpass", 429)
    metrics.increment_provider_http_error("overpass", "429")

    assert metrics.aggregation_run_total["success"] == 2
    assert dict(metrics.provider_records_total) == {("peeringdb", "fetched"): 4}
    assert metrics.provider_errors_total[("overpass", "timeout")] == 1
    assert metrics.provider_http_errors_total[("overpass", "429")] == 2
    assert metrics.aggregation_duration_seconds is None
