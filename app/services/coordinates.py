"""Where the user's position comes from.

Each source hands out one UserLocation per lookup through ``current_location()``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Tuple

import aiohttp

from app.config import get_settings
from app.models import UserLocation
from app.services.cache import TTLCache, make_cache_key
from app.services.errors import LocationNotFound

logger = logging.getLogger(__name__)

_settings = get_settings()
_geocode_cache: TTLCache[Tuple[UserLocation, str]] = TTLCache(
    ttl_s=_settings.cache_ttl_s, max_size=_settings.cache_max_size
)


class CoordinateSource(Protocol):
    async def current_location(self) -> UserLocation: ...


class StaticCoordinateSource:
    def __init__(self, latitude: float, longitude: float) -> None:
        self.location = UserLocation(latitude=latitude, longitude=longitude)

    async def current_location(self) -> UserLocation:
        return self.location


class OneShotCoordinateSource:
    """Bridges a device-style "location available" callback to an awaitable.

    Only the first fix counts; location monitoring is considered stopped after it.
    """

    def __init__(self, *, timeout_s: Optional[float] = None) -> None:
        self.timeout_s = timeout_s
        self._location: Optional[UserLocation] = None
        self._event = asyncio.Event()

    @property
    def fired(self) -> bool:
        return self._event.is_set()

    def on_location_available(self, latitude: float, longitude: float) -> None:
        if self._event.is_set():
            logger.debug("Ignoring location update (%.4f, %.4f): already have a fix", latitude, longitude)
            return
        self._location = UserLocation(latitude=latitude, longitude=longitude)
        logger.info("Location obtained: %.4f, %.4f", latitude, longitude)
        self._event.set()

    async def current_location(self) -> UserLocation:
        if self.timeout_s is None:
            await self._event.wait()
        else:
            await asyncio.wait_for(self._event.wait(), timeout=self.timeout_s)
        if self._location is None:
            raise RuntimeError("location event set without a fix")
        return self._location


async def geocode_query(session: aiohttp.ClientSession, q: str) -> Tuple[UserLocation, str]:
    """Geocode a free-text location query (Nominatim). Returns (location, display_name)."""
    settings = get_settings()
    cache_key = make_cache_key("geocode", q.strip().lower())
    cached = _geocode_cache.get(cache_key)
    if cached is not None:
        return cached

    params = {
        "q": q,
        "format": "jsonv2",
        "limit": 1,
    }
    if settings.nominatim_email:
        params["email"] = settings.nominatim_email

    headers = {"User-Agent": settings.user_agent}
    timeout = aiohttp.ClientTimeout(total=settings.http_timeout_s)

    async with session.get(str(settings.nominatim_base_url), params=params, headers=headers, timeout=timeout) as resp:
        resp.raise_for_status()
        data = await resp.json()

    if not data:
        raise LocationNotFound(f"Location not found: {q!r}")

    item = data[0]
    location = UserLocation(latitude=float(item["lat"]), longitude=float(item["lon"]))
    result = (location, str(item.get("display_name", "")))
    _geocode_cache.set(cache_key, result)
    return result


class NominatimCoordinateSource:
    def __init__(self, session: aiohttp.ClientSession, query: str) -> None:
        self.session = session
        self.query = query
        self.display_name: Optional[str] = None

    async def current_location(self) -> UserLocation:
        location, self.display_name = await geocode_query(self.session, self.query)
        return location
