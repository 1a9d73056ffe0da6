from __future__ import annotations

from dataclasses import dataclass

from facility_pipeline.core.models import FacilityRecord

DOMAIN_KEYWORDS: tuple[str, ...] = (
    "data",
    "server",
    "cloud",
    "computing",
    "ai",
    "artificial intelligence",
    "machine learning",
    "technology",
    "digital",
    "tech",
    "facility",
    "campus",
    "center",
    "company",
    "corporation",
    "inc",
    "systems",
    "solutions",
    "services",
    "research",
    "development",
)


@dataclass(frozen=True)
class RelevanceResult:
    accepted: list[FacilityRecord]
    rejected_count: int
    rejected_names: list[str]


class FacilityRelevanceFilter:
    """Keeps keyword-search hits that look like technology facilities."""

    def __init__(self, keywords: tuple[str, ...] = DOMAIN_KEYWORDS, reject_sample_size: int = 5) -> None:
        if reject_sample_size < 0:
            raise ValueError("reject_sample_size must be >= 0")
        self._keywords = tuple(keyword.lower() for keyword in keywords)
        self._reject_sample_size = reject_sample_size

    def filter(self, records: list[FacilityRecord]) -> RelevanceResult:
        accepted: list[FacilityRecord] = []
        rejected_names: list[str] = []
        for record in records:
            if self.is_relevant(record):
                accepted.append(record)
                continue
            if len(rejected_names) < self._reject_sample_size:
                rejected_names.append(record.name)
        return RelevanceResult(
            accepted=accepted,
            rejected_count=len(records) - len(accepted),
            rejected_names=rejected_names,
        )

    def is_relevant(self, record: FacilityRecord) -> bool:
        haystacks = [record.name.lower(), str(record.raw_attributes.get("address") or "").lower()]
        haystacks.extend(str(category).lower() for category in record.raw_attributes.get("categories") or [])
        return any(keyword in text for keyword in self._keywords for text in haystacks)
