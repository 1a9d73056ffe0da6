from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from facility_pipeline.core.exceptions import GeolocationError, ValidationError
from facility_pipeline.core.models import AggregatedFacility
from facility_pipeline.core.pipeline import FacilityAggregator
from geo_engine.models import Coordinate

from map_sync.geolocation import GeolocationSource
from map_sync.map_component import MapComponent
from map_sync.models import ISSUE_LABELS, Incident, MapPointerEvent
from map_sync.overlay import LOCATION_ZOOM, MapOverlaySync
from map_sync.state import FACILITY_SEARCH, GEOLOCATION, SessionState

logger = logging.getLogger(__name__)


class EnviroWatchCore:
    """Entry point for the presentation layer.

    Wires the facility aggregator, the session state and, once the map is
    ready, the overlay sync.
    """

    def __init__(
        self,
        aggregator: FacilityAggregator,
        state: SessionState | None = None,
        geolocation: GeolocationSource | None = None,
    ) -> None:
        self._aggregator = aggregator
        self.state = state or SessionState()
        self._geolocation = geolocation
        self._overlay: MapOverlaySync | None = None
        self._search_generation = 0

    @property
    def overlay(self) -> MapOverlaySync | None:
        return self._overlay

    def attach_map(self, map_component: MapComponent) -> None:
        map_component.on("ready", lambda _: self._on_map_ready(map_component))

    def _on_map_ready(self, map_component: MapComponent) -> None:
        if self._overlay is not None:
            return
        self._overlay = MapOverlaySync(map_component, self.state)
        self._overlay.bind()

    def on_selection_changed(self, listener: Callable[[Coordinate | None], None]) -> Callable[[], None]:
        return self.state.on_selection_changed(listener)

    def on_incidents_changed(self, listener: Callable[[tuple[Incident, ...]], None]) -> Callable[[], None]:
        return self.state.on_incidents_changed(listener)

    def on_facilities_changed(self, listener: Callable[[tuple[AggregatedFacility, ...]], None]) -> Callable[[], None]:
        return self.state.on_facilities_changed(listener)

    def on_loading_changed(self, listener: Callable[[tuple[str, bool]], None]) -> Callable[[], None]:
        return self.state.on_loading_changed(listener)

    def select_location(self, location: Coordinate) -> None:
        self.state.set_selection(location)

    def handle_pointer_event(self, event: MapPointerEvent | Mapping[str, Any]) -> Coordinate | None:
        if self._overlay is None:
            logger.info("pointer_event_before_map_ready", extra={"component": "map_sync"})
            return None
        return self._overlay.resolve_pointer_event(event)

    async def request_facility_search(self, center: Coordinate) -> list[AggregatedFacility]:
        self._search_generation += 1
        generation = self._search_generation
        self.state.set_loading(FACILITY_SEARCH, True)
        try:
            facilities = await self._aggregator.aggregate(center)
            self.state.publish_facilities(facilities, generation)
        finally:
            if generation == self._search_generation:
                self.state.set_loading(FACILITY_SEARCH, False)
        return facilities

    async def refresh_facilities(self) -> list[AggregatedFacility] | None:
        location = self.state.user_location
        if location is None:
            logger.info("facility_refresh_without_location", extra={"component": "map_sync"})
            return None
        return await self.request_facility_search(location)

    async def locate_user(self) -> Coordinate:
        if self._geolocation is None:
            raise GeolocationError("geolocation is not supported")
        self.state.set_loading(GEOLOCATION, True)
        try:
            location = await self._geolocation.get_current_position()
        except GeolocationError as exc:
            logger.warning("geolocation_failed", extra={"component": "map_sync", "error": str(exc)})
            raise
        finally:
            self.state.set_loading(GEOLOCATION, False)

        self.state.set_user_location(location)
        self.state.set_selection(location)
        if self._overlay is not None:
            self._overlay.center_on(location, zoom=LOCATION_ZOOM)
        await self.request_facility_search(location)
        return location

    def submit_incident(self, issue_tags: Iterable[str], notes: str = "") -> Incident:
        selection = self.state.selection
        if selection is None:
            raise ValidationError("no selection")
        tags = tuple(dict.fromkeys(tag.strip() for tag in issue_tags if tag and tag.strip()))
        if not tags:
            raise ValidationError("no issues")
        unknown = [tag for tag in tags if tag not in ISSUE_LABELS]
        if unknown:
            raise ValidationError(f"unknown issues: {', '.join(unknown)}")

        incident = Incident(
            position=selection,
            issue_tags=tags,
            notes=notes.strip(),
            submitted_at=datetime.now(timezone.utc),
        )
        self.state.add_incident(incident)
        self.state.set_selection(None)
        logger.info("incident_submitted", extra={"component": "map_sync", "issues": list(tags)})
        return incident

    def search_incidents(self, term: str) -> list[Incident]:
        return self.state.search_incidents(term)
