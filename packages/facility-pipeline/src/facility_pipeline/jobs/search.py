from __future__ import annotations

from geo_engine.models import Coordinate

from facility_pipeline.core.pipeline import AggregationReport, FacilityAggregator


async def run_facility_search(aggregator: FacilityAggregator, center: Coordinate) -> AggregationReport:
    return await aggregator.aggregate_with_report(center)


def report_lines(report: AggregationReport) -> list[dict]:
    """One JSON-ready row per facility, followed by one summary row."""
    rows: list[dict] = [facility.to_dict() for facility in report.facilities]
    rows.append(
        {
            "summary": True,
            "status": report.status,
            "facility_count": len(report.facilities),
            "used_fallback": report.used_fallback,
            "providers": {
                result.provider: result.error_kind or "ok" for result in report.provider_results
            },
        }
    )
    return rows
