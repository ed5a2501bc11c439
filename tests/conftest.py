from __future__ import annotations

import json

import pytest

from app.config import get_settings
from app.services.fetcher import FetchResponse
from app.services.pipeline import clear_dataset_cache

DATASET = [
    {
        "lat": 43.6426,
        "lon": -79.3871,
        "locationName": "Metro Hall",
        "locationDesc": "Other",
        "address": "55 John St",
        "phone": "<null>",
    },
    {
        "lat": 43.7735,
        "lon": -79.2577,
        "locationName": "Scarborough Civic Centre",
        "locationDesc": "Library",
        "address": "156 Borough Dr",
        "phone": "416-396-8943",
    },
    {"lon": -79.4, "locationName": "Broken", "locationDesc": "Other"},
]


class DummyFetcher:
    def __init__(self, status=200, body=None):
        self.status = status
        self.body = json.dumps(DATASET).encode() if body is None else body
        self.urls = []

    async def fetch(self, url):
        self.urls.append(url)
        return FetchResponse(status=self.status, body=self.body)


@pytest.fixture
def dataset():
    return [dict(entry) for entry in DATASET]


@pytest.fixture
def make_fetcher():
    return DummyFetcher


@pytest.fixture(autouse=True)
def fresh_state():
    get_settings.cache_clear()
    clear_dataset_cache()
    yield
    get_settings.cache_clear()
    clear_dataset_cache()
