from __future__ import annotations

import pytest
from pydantic import ValidationError

from facility_pipeline.config import load_settings


def test_load_settings_reads_env(monkeypatch) -> None:
    monkeypatch.setenv("ENABLED_PROVIDERS", "overpass,epa_echo")
    monkeypatch.setenv("AZURE_MAPS_KEY", "secret")
    monkeypatch.setenv("MAX_RESULTS", "6")
    monkeypatch.setenv("ENABLE_SAMPLE_FALLBACK", "true")

    settings = load_settings()

    assert settings.provider_names == ["overpass", "epa_echo"]
    assert settings.AZURE_MAPS_KEY == "secret"
    assert settings.MAX_RESULTS == 6
    assert settings.ENABLE_SAMPLE_FALLBACK is True


def test_load_settings_defaults(monkeypatch) -> None:
    for name in ("ENABLED_PROVIDERS", "MAX_RESULTS", "ENABLE_SAMPLE_FALLBACK", "DEDUP_TOLERANCE_DEGREES"):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.provider_names == ["peeringdb", "overpass", "epa_echo", "azure_poi"]
    assert settings.MAX_RESULTS is None
    assert settings.ENABLE_SAMPLE_FALLBACK is False
    assert settings.DEDUP_TOLERANCE_DEGREES == 0.001


def test_load_settings_rejects_non_positive_cap(monkeypatch) -> None:
    monkeypatch.setenv("MAX_RESULTS", "0")
    with pytest.raises(ValidationError):
        load_settings()
