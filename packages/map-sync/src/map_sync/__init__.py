"""Session state and map overlay synchronization."""

from map_sync.core import EnviroWatchCore
from map_sync.geolocation import GeolocationSource, StaticGeolocationSource
from map_sync.map_component import InMemoryMapComponent, MapComponent, OverlayHandle
from map_sync.models import ISSUE_TYPES, Incident, IssueType, MapPointerEvent, Marker, Viewport
from map_sync.overlay import MapOverlaySync
from map_sync.state import SessionState

__all__ = [
    "EnviroWatchCore",
    "GeolocationSource",
    "ISSUE_TYPES",
    "InMemoryMapComponent",
    "Incident",
    "IssueType",
    "MapComponent",
    "MapOverlaySync",
    "MapPointerEvent",
    "Marker",
    "OverlayHandle",
    "SessionState",
    "StaticGeolocationSource",
    "Viewport",
]
