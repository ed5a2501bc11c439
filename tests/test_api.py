from __future__ import annotations

import asyncio

import aiohttp
import pytest
from fastapi.testclient import TestClient

import app.main as main_module
from app.models import UserLocation
from app.services.errors import LocationNotFound, TransportFailure

client = TestClient(main_module.app)


@pytest.fixture
def use_fetcher(monkeypatch):
    def install(fetcher):
        monkeypatch.setattr(main_module, "AiohttpFetcher", lambda session: fetcher)
        return fetcher

    return install


class DummyGeocoder:
    def __init__(self, session, query):
        self.query = query

    async def current_location(self):
        if self.query == "nowhere":
            raise LocationNotFound("Location not found: 'nowhere'")
        if self.query == "nominatim down":
            raise aiohttp.ClientResponseError(None, (), status=503)
        if self.query == "nominatim slow":
            raise asyncio.TimeoutError()
        if self.query == "nominatim refused":
            raise aiohttp.ClientConnectionError("connection refused")
        return UserLocation(latitude=43.7801, longitude=-79.2601)


class FailingFetcher:
    async def fetch(self, url):
        raise TransportFailure(url, "connection refused")


def test_root_and_health():
    assert client.get("/").json()["service"] == "Cooling Centre Finder API"
    assert client.get("/health").json() == {"ok": True}


def test_nearest(use_fetcher, make_fetcher):
    use_fetcher(make_fetcher())

    resp = client.get("/api/nearest", params={"lat": 43.653226, "lon": -79.383184})

    assert resp.status_code == 200
    body = resp.json()
    assert body["user_latitude"] == 43.6532
    assert body["centre"]["name"] == "Metro Hall"
    assert body["centre"]["address"] == "55 John St, Toronto, ON"
    assert body["centre"]["phone"] == ""
    assert body["centre"]["distance_km"] == pytest.approx(1.22, abs=0.05)


def test_nearest_rejects_out_of_range_coordinates():
    assert client.get("/api/nearest", params={"lat": 91, "lon": 0}).status_code == 422


def test_nearest_with_no_centres_is_404(use_fetcher, make_fetcher):
    use_fetcher(make_fetcher(body=b"[]"))

    resp = client.get("/api/nearest", params={"lat": 43.65, "lon": -79.38})

    assert resp.status_code == 404


@pytest.mark.parametrize(
    "fetcher_kwargs",
    [{"status": 503, "body": b""}, {"body": b"<html>maintenance</html>"}],
)
def test_nearest_upstream_problems_are_502(use_fetcher, make_fetcher, fetcher_kwargs):
    use_fetcher(make_fetcher(**fetcher_kwargs))

    resp = client.get("/api/nearest", params={"lat": 43.65, "lon": -79.38})

    assert resp.status_code == 502


def test_nearest_transport_failure_is_502(use_fetcher):
    use_fetcher(FailingFetcher())

    resp = client.get("/api/nearest", params={"lat": 43.65, "lon": -79.38})

    assert resp.status_code == 502
    assert "connection refused" in resp.json()["detail"]


def test_nearest_geocode(monkeypatch, use_fetcher, make_fetcher):
    monkeypatch.setattr(main_module, "NominatimCoordinateSource", DummyGeocoder)
    use_fetcher(make_fetcher())

    resp = client.get("/api/nearest/geocode", params={"q": "Scarborough Town Centre"})

    assert resp.status_code == 200
    assert resp.json()["centre"]["name"] == "Scarborough Civic Centre Library"


@pytest.mark.parametrize(
    "query, status",
    [
        ("nowhere", 404),
        ("nominatim down", 502),
        ("nominatim slow", 502),
        ("nominatim refused", 502),
    ],
)
def test_nearest_geocode_errors(monkeypatch, query, status):
    monkeypatch.setattr(main_module, "NominatimCoordinateSource", DummyGeocoder)

    assert client.get("/api/nearest/geocode", params={"q": query}).status_code == status


def test_centres_ranked(use_fetcher, make_fetcher):
    use_fetcher(make_fetcher())

    resp = client.get("/api/centres", params={"lat": 43.65, "lon": -79.38, "limit": 1})

    assert resp.status_code == 200
    assert [c["name"] for c in resp.json()] == ["Metro Hall"]
