from facility_pipeline.core.metrics import InMemoryAggregationMetricsCollector
from facility_pipeline.core.prometheus_exporter import AggregationPrometheusExporter


def _sample_line(output: str, name: str, *labels: str) -> str:
    for line in output.splitlines():
        if line.startswith(name + "{") and all(label in line for label in labels):
            return line
    raise AssertionError(f"{name} sample with {labels} not rendered")


def test_aggregation_prometheus_exporter_renders_metrics() -> None:
    metrics = InMemoryAggregationMetricsCollector()
    metrics.observe_stage_duration("collect", 12.5)
    metrics.observe_stage_duration("deduplicate", 4.1)
    metrics.increment_external_api_error()
    metrics.set_published_facilities(8)
    metrics.increment_run("partial")
    metrics.add_provider_records("overpass", "fetched", 3)
    metrics.increment_provider_error("epa_echo", "timeout")
    metrics.increment_provider_http_error("epa_echo", 503)
    metrics.increment_provider_retry("overpass")
    metrics.observe_aggregation_duration(1.5)

    output = AggregationPrometheusExporter().render(metrics)

    assert 'aggregation_stage_duration_ms{stage="collect"} 12.5' in output
    assert "aggregation_external_api_errors_total 1.0" in output
    assert "aggregation_published_facilities 8.0" in output
    assert 'aggregation_run_total{status="partial"} 1.0' in output
    assert _sample_line(
        output, "aggregation_provider_records_total", 'provider="overpass"', 'result="fetched"'
    ).endswith(" 3.0")
    assert _sample_line(
        output, "aggregation_provider_errors_total", 'provider="epa_echo"', 'kind="timeout"'
    ).endswith(" 1.0")
    assert _sample_line(
        output, "aggregation_provider_http_errors_total", 'provider="epa_echo"', 'code="503"'
    ).endswith(" 1.0")
    assert 'aggregation_provider_retries_total{provider="overpass"} 1.0' in output
    assert "aggregation_duration_seconds 1.5" in output


def test_exporter_keeps_latest_stage_duration() -> None:
    metrics = InMemoryAggregationMetricsCollector()
    metrics.observe_stage_duration("score", 1.0)
    metrics.observe_stage_duration("score", 2.0)

    output = AggregationPrometheusExporter().render(metrics)

    assert 'aggregation_stage_duration_ms{stage="score"} 2.0' in output
