from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest
from geo_engine.models import Coordinate

from facility_pipeline.core.metrics import InMemoryAggregationMetricsCollector
from facility_pipeline.core.models import UNKNOWN_OPERATOR, FacilitySource
from facility_pipeline.providers.epa_echo import EpaEchoProvider
from facility_pipeline.providers.overpass import OverpassDataCenterProvider, build_overpass_query
from facility_pipeline.providers.peeringdb import PeeringDbFacilityProvider

CENTER = Coordinate(lat=47.62, lng=-122.35)


def mock_client_factory(handler):
    transport = httpx.MockTransport(handler)
    return lambda: httpx.AsyncClient(transport=transport, timeout=5.0)


@pytest.mark.asyncio
async def test_peeringdb_provider_queries_half_degree_bounding_box() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        assert float(params["latitude__gte"]) == pytest.approx(47.12)
        assert float(params["latitude__lte"]) == pytest.approx(48.12)
        assert float(params["longitude__gte"]) == pytest.approx(-122.85)
        assert float(params["longitude__lte"]) == pytest.approx(-121.85)
        return httpx.Response(
            status_code=200,
            json={
                "data": [
                    {
                        "id": 1234,
                        "name": "Westin Building Exchange",
                        "org_name": "Westin Building Exchange LLC",
                        "latitude": 47.6145,
                        "longitude": -122.3385,
                        "address1": "2001 6th Ave",
                        "city": "Seattle",
                        "country": "US",
                    },
                    {"id": 99, "name": "No Coordinates", "latitude": None, "longitude": None},
                ]
            },
        )

    provider = PeeringDbFacilityProvider(client_factory=mock_client_factory(handler))
    records = await provider.search(CENTER, radius_meters=1_000)

    assert len(records) == 1
    assert records[0].id == "fac-1234"
    assert records[0].operator == "Westin Building Exchange LLC"
    assert records[0].source is FacilitySource.FACILITY_REGISTRY
    assert records[0].raw_attributes["address"] == "2001 6th Ave, Seattle, US"


@pytest.mark.asyncio
async def test_peeringdb_provider_returns_empty_on_malformed_payload() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"unexpected": True})

    provider = PeeringDbFacilityProvider(client_factory=mock_client_factory(handler))
    result = await provider.collect(CENTER)

    assert result.records == []
    assert result.error_kind == "normalization_failed"


@pytest.mark.asyncio
async def test_peeringdb_provider_returns_empty_on_invalid_json() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, content=b"<html>maintenance</html>")

    provider = PeeringDbFacilityProvider(client_factory=mock_client_factory(handler))
    assert await provider.search(CENTER) == []


def test_overpass_query_targets_data_center_tags() -> None:
    query = build_overpass_query(CENTER, radius_meters=50_000)

    assert query.startswith("[out:json]")
    assert 'node["telecom"="data_center"](around:50000,47.62,-122.35);' in query
    assert 'way["amenity"="data_center"](around:50000,47.62,-122.35);' in query
    assert query.endswith("out center tags;")


@pytest.mark.asyncio
async def test_overpass_provider_reads_nodes_and_way_centers() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        form = parse_qs(request.content.decode("utf-8"))
        assert "around:50000" in form["data"][0]
        return httpx.Response(
            status_code=200,
            json={
                "elements": [
                    {
                        "type": "node",
                        "id": 1,
                        "lat": 47.6,
                        "lon": -122.33,
                        "tags": {"telecom": "data_center", "name": "Sabey Intergate", "operator": "Sabey"},
                    },
                    {
                        "type": "way",
                        "id": 2,
                        "center": {"lat": 47.5, "lon": -122.2},
                        "tags": {"building": "data_center", "addr:street": "Grady Way", "addr:housenumber": "12"},
                    },
                    {"type": "way", "id": 3, "tags": {"building": "data_center"}},
                    {"type": "node", "id": 4, "lat": 45.52, "lon": -122.68, "tags": {"telecom": "data_center"}},
                ]
            },
        )

    provider = OverpassDataCenterProvider(client_factory=mock_client_factory(handler))
    records = await provider.search(CENTER)

    assert [record.id for record in records] == ["node/1", "way/2"]
    assert records[0].operator == "Sabey"
    assert records[1].name == "Tagged Data Center 2"
    assert records[1].operator == UNKNOWN_OPERATOR
    assert records[1].position == Coordinate(lat=47.5, lng=-122.2)
    assert records[1].raw_attributes["address"] == "12 Grady Way"
    assert records[1].raw_attributes["categories"] == ["building=data_center"]


@pytest.mark.asyncio
async def test_overpass_provider_retries_rate_limit_then_succeeds() -> None:
    state = {"calls": 0}

    def handler(_: httpx.Request) -> httpx.Response:
        state["calls"] += 1
        if state["calls"] == 1:
            return httpx.Response(status_code=429, json={"remark": "rate limited"})
        return httpx.Response(status_code=200, json={"elements": []})

    metrics = InMemoryAggregationMetricsCollector()
    provider = OverpassDataCenterProvider(
        retry_base_delay_seconds=0.0,
        metrics=metrics,
        client_factory=mock_client_factory(handler),
    )
    result = await provider.collect(CENTER)

    assert not result.failed
    assert state["calls"] == 2
    assert metrics.provider_retries_total["overpass"] == 1
    assert dict(metrics.provider_http_errors_total) == {("overpass", "429"): 1}


@pytest.mark.asyncio
async def test_epa_echo_provider_reads_violation_counts() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        assert params["p_ncs"] == "518210"
        assert float(params["p_radius"]) == pytest.approx(31.07, abs=0.01)
        return httpx.Response(
            status_code=200,
            json={
                "Results": {
                    "Facilities": [
                        {
                            "RegistryID": "110000001",
                            "AIRName": "Tukwila Compute Campus",
                            "FacLat": "47.47",
                            "FacLong": "-122.26",
                            "AIRStreet": "1 Data Way",
                            "AIRCity": "Tukwila",
                            "AIRState": "WA",
                            "AIRQtrsWithViol": "5",
                            "AIRLastInspectionDate": "2024-03-01",
                        },
                        {"RegistryID": "110000002", "AIRName": "Clean Site", "FacLat": 47.5, "FacLong": -122.3},
                        {"RegistryID": "110000003", "AIRName": "Quincy Campus", "FacLat": 47.23, "FacLong": -119.85},
                    ]
                }
            },
        )

    provider = EpaEchoProvider(client_factory=mock_client_factory(handler))
    records = await provider.search(CENTER)

    assert [record.id for record in records] == ["echo-110000001", "echo-110000002"]
    assert records[0].source is FacilitySource.COMPLIANCE_REGISTRY
    assert records[0].violation_count == 5
    assert records[0].raw_attributes["inspection_date"] == "2024-03-01"
    assert records[0].raw_attributes["address"] == "1 Data Way, Tukwila, WA"
    assert records[1].violation_count == 0


@pytest.mark.asyncio
async def test_epa_echo_provider_caps_radius_at_one_hundred_miles() -> None:
    radii: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        radii.append(float(request.url.params["p_radius"]))
        return httpx.Response(status_code=200, json={"Results": {"Facilities": []}})

    provider = EpaEchoProvider(radius_meters=500_000, client_factory=mock_client_factory(handler))
    await provider.search(CENTER)

    assert radii == [100.0]


@pytest.mark.asyncio
async def test_epa_echo_provider_contains_server_errors() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=500, text="internal error")

    provider = EpaEchoProvider(max_retries=1, client_factory=mock_client_factory(handler))
    result = await provider.collect(CENTER)

    assert result.failed
    assert result.records == []


@pytest.mark.asyncio
async def test_epa_echo_provider_drops_records_outside_requested_radius() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=200,
            json={
                "Results": {
                    "Facilities": [
                        {"RegistryID": "1", "AIRName": "Bellevue Site", "FacLat": 47.61, "FacLong": -122.2},
                        {"RegistryID": "2", "AIRName": "Everett Site", "FacLat": 47.98, "FacLong": -122.2},
                    ]
                }
            },
        )

    provider = EpaEchoProvider(radius_meters=20_000, client_factory=mock_client_factory(handler))
    records = await provider.search(CENTER)

    assert [record.id for record in records] == ["echo-1"]
