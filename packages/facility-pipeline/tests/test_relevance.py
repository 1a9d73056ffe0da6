from geo_engine.models import Coordinate

from facility_pipeline.core.models import FacilityRecord, FacilitySource
from facility_pipeline.core.relevance import FacilityRelevanceFilter


def _poi(name: str, **attributes) -> FacilityRecord:
    return FacilityRecord(
        id=name,
        name=name,
        position=Coordinate(lat=47.6, lng=-122.3),
        source=FacilitySource.POI_SEARCH,
        raw_attributes=attributes,
    )


def test_relevance_matches_name_address_or_category_case_insensitively() -> None:
    relevance = FacilityRelevanceFilter()

    assert relevance.is_relevant(_poi("SABEY DATA CENTER"))
    assert relevance.is_relevant(_poi("Building 4", address="100 Tech Park Way"))
    assert relevance.is_relevant(_poi("Building 5", categories=["Computer Services"]))
    assert not relevance.is_relevant(_poi("Pike Bakery", address="Pike St", categories=["Bakery"]))


def test_relevance_reports_rejected_sample() -> None:
    relevance = FacilityRelevanceFilter(keywords=("server",), reject_sample_size=2)
    records = [_poi("Cafe"), _poi("Server Farm"), _poi("Park"), _poi("Gym")]

    result = relevance.filter(records)

    assert [record.name for record in result.accepted] == ["Server Farm"]
    assert result.rejected_count == 3
    assert result.rejected_names == ["Cafe", "Park"]
