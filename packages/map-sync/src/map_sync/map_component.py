from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from typing import Any, Protocol

from geo_engine.models import Coordinate

from map_sync.models import Marker, Viewport

EventHandler = Callable[[Any], None]


class OverlayHandle(Protocol):
    def clear(self) -> None: ...

    def add_markers(self, markers: list[Marker]) -> None: ...


class MapComponent(Protocol):
    def create_overlay(self, name: str) -> OverlayHandle: ...

    def project_pixel_to_coordinate(self, pixel: tuple[float, float]) -> Coordinate | None: ...

    def set_viewport(self, viewport: Viewport) -> None: ...

    def on(self, event: str, handler: EventHandler) -> None: ...


class InMemoryOverlay(OverlayHandle):
    def __init__(self, name: str) -> None:
        self.name = name
        self.markers: list[Marker] = []
        self.clear_count = 0

    def clear(self) -> None:
        self.markers = []
        self.clear_count += 1

    def add_markers(self, markers: list[Marker]) -> None:
        self.markers.extend(markers)


class InMemoryMapComponent(MapComponent):
    """Headless map used by tests and scripted sessions.

    Pixels project linearly from ``origin`` (the coordinate at pixel 0,0) with
    ``degrees_per_pixel`` per axis; y grows southwards.
    """

    def __init__(self, origin: Coordinate | None = None, degrees_per_pixel: float = 0.0001) -> None:
        self.origin = origin or Coordinate(lat=47.62, lng=-122.35)
        self.degrees_per_pixel = degrees_per_pixel
        self.overlays: dict[str, InMemoryOverlay] = {}
        self.viewports: list[Viewport] = []
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def create_overlay(self, name: str) -> InMemoryOverlay:
        overlay = InMemoryOverlay(name)
        self.overlays[name] = overlay
        return overlay

    def project_pixel_to_coordinate(self, pixel: tuple[float, float]) -> Coordinate | None:
        x, y = pixel
        return Coordinate(
            lat=self.origin.lat - y * self.degrees_per_pixel,
            lng=self.origin.lng + x * self.degrees_per_pixel,
        )

    def set_viewport(self, viewport: Viewport) -> None:
        self.viewports.append(viewport)

    def on(self, event: str, handler: EventHandler) -> None:
        self._handlers[event].append(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        for handler in list(self._handlers[event]):
            handler(payload)
