from __future__ import annotations

import logging
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider

_configured = False
_logging_configured = False
_probe_filter_configured = False


class ProbeAccessLogFilter(logging.Filter):
    """Drops successful uvicorn access lines for health probe paths."""

    def __init__(self, ignored_paths: tuple[str, ...]) -> None:
        super().__init__()
        self._ignored_paths = {path.rstrip("/") or "/" for path in ignored_paths}

    def filter(self, record: logging.LogRecord) -> bool:
        args: Any = getattr(record, "args", ())
        if not isinstance(args, tuple) or len(args) < 5 or not isinstance(args[2], str):
            return True
        path = args[2].split("?", 1)[0].rstrip("/") or "/"
        try:
            status = int(args[4])
        except (TypeError, ValueError):
            return True
        return not (status == 200 and path in self._ignored_paths)


def configure_otel(service_name: str) -> None:
    global _configured
    if _configured:
        return
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    trace.set_tracer_provider(provider)
    _configured = True


def configure_logging(level: str = "INFO") -> None:
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    _logging_configured = True


def configure_probe_access_log_filter(ignored_paths: tuple[str, ...] = ("/healthz", "/readyz", "/metrics")) -> None:
    global _probe_filter_configured
    if _probe_filter_configured:
        return
    logging.getLogger("uvicorn.access").addFilter(ProbeAccessLogFilter(ignored_paths=ignored_paths))
    _probe_filter_configured = True
