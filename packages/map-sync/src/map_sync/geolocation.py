from __future__ import annotations

from typing import Protocol

from facility_pipeline.core.exceptions import GeolocationError
from geo_engine.models import Coordinate


class GeolocationSource(Protocol):
    async def get_current_position(self) -> Coordinate: ...


class StaticGeolocationSource(GeolocationSource):
    """Reports a fixed position, or a fixed failure when none is known."""

    def __init__(self, position: Coordinate | None = None, error_message: str = "position unavailable") -> None:
        self._position = position
        self._error_message = error_message

    async def get_current_position(self) -> Coordinate:
        if self._position is None:
            raise GeolocationError(self._error_message)
        return self._position
