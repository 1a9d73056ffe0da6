import logging

from facility_pipeline.observability import ProbeAccessLogFilter


def _access_record(path: str, status: int) -> logging.LogRecord:
    return logging.LogRecord(
        name="uvicorn.access",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='%s - "%s %s HTTP/%s" %d',
        args=("127.0.0.1:5000", "GET", path, "1.1", status),
        exc_info=None,
    )


def test_probe_filter_drops_successful_probe_lines() -> None:
    probe_filter = ProbeAccessLogFilter(ignored_paths=("/healthz", "/metrics"))

    assert probe_filter.filter(_access_record("/healthz", 200)) is False
    assert probe_filter.filter(_access_record("/metrics/?format=text", 200)) is False


def test_probe_filter_keeps_failures_and_other_paths() -> None:
    probe_filter = ProbeAccessLogFilter(ignored_paths=("/healthz",))

    assert probe_filter.filter(_access_record("/healthz", 503)) is True
    assert probe_filter.filter(_access_record("/readyz", 200)) is True
