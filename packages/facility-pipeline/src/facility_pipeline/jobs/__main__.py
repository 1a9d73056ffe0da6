from __future__ import annotations

import asyncio
import json
import os

from geo_engine.models import Coordinate

from facility_pipeline.config import load_settings
from facility_pipeline.dependencies import build_aggregator
from facility_pipeline.jobs.search import report_lines, run_facility_search
from facility_pipeline.monitoring.state import aggregation_metrics
from facility_pipeline.observability import configure_logging, configure_otel


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"missing required environment variable: {name}")
    return value


def _parse_center() -> Coordinate:
    try:
        return Coordinate.validated(
            float(_required_env("SEARCH_CENTER_LAT")),
            float(_required_env("SEARCH_CENTER_LNG")),
        )
    except ValueError as exc:
        raise RuntimeError(f"invalid search center: {exc}") from exc


def main() -> None:
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    settings = load_settings()
    configure_otel(settings.SERVICE_NAME)
    center = _parse_center()
    aggregator = build_aggregator(settings=settings, metrics=aggregation_metrics)
    report = asyncio.run(run_facility_search(aggregator, center))
    for row in report_lines(report):
        print(json.dumps(row, ensure_ascii=False))


if __name__ == "__main__":
    main()
