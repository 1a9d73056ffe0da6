from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from facility_pipeline.core.models import AggregatedFacility
from geo_engine.models import BoundingBox, Coordinate, is_valid_coordinate

from map_sync.map_component import MapComponent
from map_sync.models import Incident, MapPointerEvent, Marker, Viewport
from map_sync.state import SessionState

logger = logging.getLogger(__name__)

INCIDENTS_OVERLAY = "incidents"
SELECTION_OVERLAY = "selection"
FACILITIES_OVERLAY = "facilities"
FACILITY_VIEWPORT_PADDING = 50
LOCATION_ZOOM = 15


class MapOverlaySync:
    """Keeps the three marker overlays in line with the session state.

    Built once the map is ready; it owns its overlay handles and is the only
    code that draws on them.
    """

    def __init__(
        self,
        map_component: MapComponent,
        state: SessionState,
        facility_padding: int = FACILITY_VIEWPORT_PADDING,
    ) -> None:
        self._map = map_component
        self._state = state
        self._facility_padding = facility_padding
        self._incidents = map_component.create_overlay(INCIDENTS_OVERLAY)
        self._selection = map_component.create_overlay(SELECTION_OVERLAY)
        self._facilities = map_component.create_overlay(FACILITIES_OVERLAY)
        self._drawn_incident_count = 0
        self._unsubscribers: list[Callable[[], None]] = []
        self._pointer_handlers_registered = False

    def bind(self) -> None:
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self._state.on_selection_changed(self.set_selection),
            self._state.on_incidents_changed(self.set_incidents),
            self._state.on_facilities_changed(self.set_facilities),
        ]
        if not self._pointer_handlers_registered:
            self._map.on("click", self.resolve_pointer_event)
            self._map.on("touchstart", self.resolve_pointer_event)
            self._pointer_handlers_registered = True
        self.set_selection(self._state.selection)
        self.set_incidents(self._state.incidents)
        if self._state.facilities:
            self.set_facilities(self._state.facilities)
        logger.info("map_overlays_bound", extra={"component": "map_sync"})

    def unbind(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def set_selection(self, selection: Coordinate | None) -> None:
        self._selection.clear()
        if selection is not None:
            self._selection.add_markers([Marker(position=selection)])

    def set_incidents(self, incidents: Sequence[Incident]) -> None:
        # incidents arrive newest first and are never removed
        new_count = len(incidents) - self._drawn_incident_count
        if new_count <= 0:
            return
        fresh = list(incidents[:new_count])
        fresh.reverse()
        self._incidents.add_markers([_incident_marker(incident) for incident in fresh])
        self._drawn_incident_count = len(incidents)

    def set_facilities(self, facilities: Sequence[AggregatedFacility]) -> None:
        self._facilities.clear()
        if not facilities:
            return
        markers = [_facility_marker(facility) for facility in facilities]
        self._facilities.add_markers(markers)
        bounds = BoundingBox.from_points([marker.position for marker in markers])
        self._map.set_viewport(Viewport.fitting(bounds, padding=self._facility_padding))

    def center_on(self, location: Coordinate, zoom: float = LOCATION_ZOOM) -> None:
        self._map.set_viewport(Viewport.centered(location, zoom=zoom))

    def resolve_pointer_event(self, event: MapPointerEvent | Mapping[str, Any] | None) -> Coordinate | None:
        pointer = MapPointerEvent.from_payload(event)
        if pointer.position is not None:
            lng, lat = pointer.position
        elif pointer.pixel is not None:
            projected = self._map.project_pixel_to_coordinate(pointer.pixel)
            if projected is None:
                logger.info("pointer_event_not_projectable", extra={"pixel": pointer.pixel})
                return None
            lat, lng = projected.lat, projected.lng
        else:
            logger.debug("pointer_event_without_location", extra={"component": "map_sync"})
            return None

        if not is_valid_coordinate(lat, lng):
            logger.warning("pointer_event_out_of_range", extra={"lat": lat, "lng": lng})
            return None
        selection = Coordinate(lat=lat, lng=lng)
        self._state.set_selection(selection)
        return selection


def _incident_marker(incident: Incident) -> Marker:
    return Marker(
        position=incident.position,
        properties={
            "title": incident.title,
            "issues": list(incident.issue_tags),
            "submitted_at": incident.submitted_at.isoformat(),
        },
    )


def _facility_marker(facility: AggregatedFacility) -> Marker:
    return Marker(
        position=facility.position,
        properties={
            "name": facility.name,
            "operator": facility.operator,
            "type": facility.source.value,
            "impact": facility.impact_category.value,
            "impact_score": facility.impact_score,
        },
    )
