"""Facility provider clients."""

from facility_pipeline.providers.azure_poi import AzureMapsPoiProvider
from facility_pipeline.providers.base import BaseFacilityProvider, ProviderResult
from facility_pipeline.providers.epa_echo import EpaEchoProvider
from facility_pipeline.providers.factory import build_provider, build_providers
from facility_pipeline.providers.overpass import OverpassDataCenterProvider
from facility_pipeline.providers.peeringdb import PeeringDbFacilityProvider

__all__ = [
    "AzureMapsPoiProvider",
    "BaseFacilityProvider",
    "EpaEchoProvider",
    "OverpassDataCenterProvider",
    "PeeringDbFacilityProvider",
    "ProviderResult",
    "build_provider",
    "build_providers",
]
