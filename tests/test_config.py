from __future__ import annotations

from app.config import get_settings


def test_defaults():
    settings = get_settings()

    assert str(settings.dataset_url).startswith("http://app.toronto.ca/opendata")
    assert settings.strict_closest_details is False
    assert settings.display_locality == "Toronto, ON"
    assert settings.fetch_retries == 2


def test_reads_env(monkeypatch):
    monkeypatch.setenv("DATASET_URL", "https://example.test/centres.json")
    monkeypatch.setenv("STRICT_CLOSEST_DETAILS", "1")
    monkeypatch.setenv("HTTP_TIMEOUT_S", "3.5")
    monkeypatch.setenv("DISPLAY_LOCALITY", "Ottawa, ON")

    settings = get_settings()

    assert str(settings.dataset_url) == "https://example.test/centres.json"
    assert settings.strict_closest_details is True
    assert settings.http_timeout_s == 3.5
    assert settings.display_locality == "Ottawa, ON"


def test_settings_are_memoized():
    assert get_settings() is get_settings()
