from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = "envirowatch-facility-pipeline/0.1"


class AggregationSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "facility-pipeline"
    ENABLED_PROVIDERS: str = "peeringdb,overpass,epa_echo,azure_poi"

    AZURE_MAPS_KEY: str | None = None
    PEERINGDB_API_KEY: str | None = None
    AZURE_POI_BASE_URL: str = "https://atlas.microsoft.com/search/poi/json"
    PEERINGDB_BASE_URL: str = "https://www.peeringdb.com/api/fac"
    OVERPASS_BASE_URL: str = "https://overpass-api.de/api/interpreter"
    EPA_ECHO_BASE_URL: str = "https://echodata.epa.gov/echo/air_rest_services.get_facility_info"
    HTTP_USER_AGENT: str = DEFAULT_USER_AGENT

    AZURE_POI_RADIUS_METERS: float = Field(default=15_000.0, gt=0)
    OVERPASS_RADIUS_METERS: float = Field(default=50_000.0, gt=0)
    EPA_ECHO_RADIUS_METERS: float = Field(default=50_000.0, gt=0)

    PROVIDER_CONNECT_TIMEOUT_SECONDS: float = Field(default=2.0, ge=0)
    PROVIDER_READ_TIMEOUT_SECONDS: float = Field(default=5.0, ge=0)
    PROVIDER_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)
    PROVIDER_MAX_RETRIES: int = Field(default=3, ge=1)
    PROVIDER_RETRY_BASE_DELAY_SECONDS: float = Field(default=0.1, ge=0)

    DEDUP_TOLERANCE_DEGREES: float = Field(default=0.001, ge=0)
    MAX_RESULTS: int | None = Field(default=None, gt=0)
    ENABLE_SAMPLE_FALLBACK: bool = False

    @property
    def provider_names(self) -> list[str]:
        return [name.strip() for name in self.ENABLED_PROVIDERS.split(",") if name.strip()]


def load_settings(**overrides: object) -> AggregationSettings:
    return AggregationSettings(**overrides)
