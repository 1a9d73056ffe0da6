from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from geo_engine.models import BoundingBox, Coordinate


@dataclass(frozen=True)
class IssueType:
    key: str
    label: str


ISSUE_TYPES: tuple[IssueType, ...] = (
    IssueType("noise", "Noise Pollution"),
    IssueType("heat", "Heat Island"),
    IssueType("truck-traffic", "Truck Traffic"),
    IssueType("odor", "Odor"),
    IssueType("water", "Water Quality"),
    IssueType("light", "Light Pollution"),
    IssueType("air-quality", "Air Quality"),
    IssueType("waste", "Waste/Dumping"),
    IssueType("construction", "Construction"),
    IssueType("chemical", "Chemical Spill"),
    IssueType("wildlife", "Wildlife Disturbance"),
    IssueType("vegetation", "Vegetation Damage"),
)

ISSUE_LABELS: dict[str, str] = {issue.key: issue.label for issue in ISSUE_TYPES}


@dataclass(frozen=True)
class Incident:
    position: Coordinate
    issue_tags: tuple[str, ...]
    notes: str
    submitted_at: datetime

    @property
    def title(self) -> str:
        return self.issue_tags[0]

    def matches(self, term: str) -> bool:
        needle = term.strip().lower()
        if not needle:
            return True
        if any(needle in ISSUE_LABELS.get(tag, tag).lower() for tag in self.issue_tags):
            return True
        return needle in self.notes.lower()


@dataclass(frozen=True)
class Marker:
    position: Coordinate
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Viewport:
    center: Coordinate | None = None
    zoom: float | None = None
    bounds: BoundingBox | None = None
    padding: int | None = None

    @classmethod
    def centered(cls, center: Coordinate, zoom: float) -> Viewport:
        return cls(center=center, zoom=zoom)

    @classmethod
    def fitting(cls, bounds: BoundingBox, padding: int) -> Viewport:
        return cls(bounds=bounds, padding=padding)


@dataclass(frozen=True)
class MapPointerEvent:
    """A click or touch on the map.

    ``position`` is ``(lng, lat)`` when the map already resolved it; ``pixel``
    is the device ``(x, y)`` that still has to be projected.
    """

    position: tuple[float, float] | None = None
    pixel: tuple[float, float] | None = None

    @classmethod
    def from_payload(cls, payload: MapPointerEvent | Mapping[str, Any] | None) -> MapPointerEvent:
        if isinstance(payload, MapPointerEvent):
            return payload
        if not isinstance(payload, Mapping):
            return cls()
        return cls(position=_pair(payload.get("position")), pixel=_pair(payload.get("pixel")))


def _pair(value: Any) -> tuple[float, float] | None:
    if not isinstance(value, Sequence) or isinstance(value, str) or len(value) != 2:
        return None
    try:
        return (float(value[0]), float(value[1]))
    except (TypeError, ValueError):
        return None
