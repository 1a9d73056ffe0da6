from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Generic, TypeVar

from facility_pipeline.core.models import AggregatedFacility
from geo_engine.models import Coordinate

from map_sync.models import Incident

T = TypeVar("T")
logger = logging.getLogger(__name__)

GEOLOCATION = "geolocation"
FACILITY_SEARCH = "facility_search"


class _Listeners(Generic[T]):
    def __init__(self, name: str) -> None:
        self._name = name
        self._items: list[Callable[[T], None]] = []

    def add(self, listener: Callable[[T], None]) -> Callable[[], None]:
        self._items.append(listener)

        def _remove() -> None:
            if listener in self._items:
                self._items.remove(listener)

        return _remove

    def notify(self, value: T) -> None:
        for listener in list(self._items):
            try:
                listener(value)
            except Exception:
                logger.exception("session_listener_failed", extra={"component": "map_sync", "field": self._name})


class SessionState:
    """In-memory session model.

    Every field is replaced as a whole. Each field has one writer: location
    resolution owns ``selection``, report submission owns ``incidents`` and
    the facility search owns ``facilities``.
    """

    def __init__(self) -> None:
        self._selection: Coordinate | None = None
        self._user_location: Coordinate | None = None
        self._incidents: tuple[Incident, ...] = ()
        self._facilities: tuple[AggregatedFacility, ...] = ()
        self._facility_generation = 0
        self._loading: dict[str, bool] = {GEOLOCATION: False, FACILITY_SEARCH: False}
        self._selection_listeners: _Listeners[Coordinate | None] = _Listeners("selection")
        self._incident_listeners: _Listeners[tuple[Incident, ...]] = _Listeners("incidents")
        self._facility_listeners: _Listeners[tuple[AggregatedFacility, ...]] = _Listeners("facilities")
        self._loading_listeners: _Listeners[tuple[str, bool]] = _Listeners("loading")

    @property
    def selection(self) -> Coordinate | None:
        return self._selection

    @property
    def user_location(self) -> Coordinate | None:
        return self._user_location

    @property
    def incidents(self) -> tuple[Incident, ...]:
        return self._incidents

    @property
    def facilities(self) -> tuple[AggregatedFacility, ...]:
        return self._facilities

    @property
    def facility_generation(self) -> int:
        return self._facility_generation

    def is_loading(self, operation: str) -> bool:
        return self._loading.get(operation, False)

    def on_selection_changed(self, listener: Callable[[Coordinate | None], None]) -> Callable[[], None]:
        return self._selection_listeners.add(listener)

    def on_incidents_changed(self, listener: Callable[[tuple[Incident, ...]], None]) -> Callable[[], None]:
        return self._incident_listeners.add(listener)

    def on_facilities_changed(self, listener: Callable[[tuple[AggregatedFacility, ...]], None]) -> Callable[[], None]:
        return self._facility_listeners.add(listener)

    def on_loading_changed(self, listener: Callable[[tuple[str, bool]], None]) -> Callable[[], None]:
        return self._loading_listeners.add(listener)

    def set_selection(self, selection: Coordinate | None) -> None:
        self._selection = selection
        self._selection_listeners.notify(selection)

    def set_user_location(self, location: Coordinate) -> None:
        self._user_location = location

    def add_incident(self, incident: Incident) -> None:
        self._incidents = (incident, *self._incidents)
        self._incident_listeners.notify(self._incidents)

    def publish_facilities(self, facilities: Sequence[AggregatedFacility], generation: int) -> bool:
        if generation < self._facility_generation:
            logger.info(
                "stale_facilities_discarded",
                extra={"generation": generation, "latest_generation": self._facility_generation},
            )
            return False
        self._facility_generation = generation
        self._facilities = tuple(facilities)
        self._facility_listeners.notify(self._facilities)
        return True

    def set_loading(self, operation: str, loading: bool) -> None:
        if operation not in self._loading:
            raise ValueError(f"unknown loading operation '{operation}'")
        if self._loading[operation] == loading:
            return
        self._loading[operation] = loading
        self._loading_listeners.notify((operation, loading))

    def search_incidents(self, term: str) -> list[Incident]:
        return [incident for incident in self._incidents if incident.matches(term)]
