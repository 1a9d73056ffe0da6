from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass


@dataclass(frozen=True)
class StageDuration:
    stage: str
    duration_ms: float


class InMemoryAggregationMetricsCollector:
    def __init__(self) -> None:
        self.stage_durations: list[StageDuration] = []
        self.external_api_error_count = 0
        self.published_facilities = 0
        self.aggregation_run_total: dict[str, int] = defaultdict(int)
        self.provider_records_total: dict[tuple[str, str], int] = defaultdict(int)
        self.provider_errors_total: dict[tuple[str, str], int] = defaultdict(int)
        self.provider_http_errors_total: dict[tuple[str, str], int] = defaultdict(int)
        self.provider_retries_total: dict[str, int] = defaultdict(int)
        self.aggregation_duration_seconds: float | None = None

    def observe_stage_duration(self, stage: str, duration_ms: float) -> None:
        self.stage_durations.append(StageDuration(stage=stage, duration_ms=duration_ms))

    def increment_external_api_error(self) -> None:
        self.external_api_error_count += 1

    def increment_run(self, status: str) -> None:
        self.aggregation_run_total[status] += 1

    def add_provider_records(self, provider: str, result: str, count: int) -> None:
        if count <= 0:
            return
        self.provider_records_total[(provider, result)] += count

    def increment_provider_error(self, provider: str, kind: str) -> None:
        self.provider_errors_total[(provider, kind)] += 1

    def increment_provider_http_error(self, provider: str, code: int | str) -> None:
        self.provider_http_errors_total[(provider, str(code))] += 1

    def increment_provider_retry(self, provider: str) -> None:
        self.provider_retries_total[provider] += 1

    def set_published_facilities(self, count: int) -> None:
        self.published_facilities = count

    def observe_aggregation_duration(self, duration_seconds: float) -> None:
        self.aggregation_duration_seconds = duration_seconds
