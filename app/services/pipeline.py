"""Coordinate -> dataset -> candidates -> nearest centre, as one awaitable."""

from __future__ import annotations

import logging
from typing import List, Optional

from app.config import get_settings
from app.models import Candidate, ClosestResult, UserLocation
from app.services.cache import TTLCache, make_cache_key
from app.services.coordinates import CoordinateSource
from app.services.errors import CoolingCentreError, NonSuccessStatus
from app.services.fetcher import DatasetFetcher
from app.services.parser import decode_payload, parse_candidates
from app.services.resolver import resolve_closest

logger = logging.getLogger(__name__)

_settings = get_settings()
_dataset_cache: TTLCache[List[Candidate]] = TTLCache(
    ttl_s=_settings.cache_ttl_s, max_size=_settings.cache_max_size
)


async def load_candidates(fetcher: DatasetFetcher, url: Optional[str] = None) -> List[Candidate]:
    """Fetch and parse the dataset. Only an HTTP 200 body is parsed."""
    url = url or str(get_settings().dataset_url)
    cache_key = make_cache_key("dataset", url)
    cached = _dataset_cache.get(cache_key)
    if cached is not None:
        return cached

    response = await fetcher.fetch(url)
    if response.status != 200:
        logger.error("Dataset request to %s returned HTTP %d", url, response.status)
        raise NonSuccessStatus(url, response.status)

    candidates = parse_candidates(decode_payload(response.body))
    logger.info("Loaded %d cooling centres from %s", len(candidates), url)
    _dataset_cache.set(cache_key, candidates)
    return candidates


async def find_nearest(
    user: UserLocation,
    fetcher: DatasetFetcher,
    *,
    url: Optional[str] = None,
    strict: Optional[bool] = None,
) -> Optional[ClosestResult]:
    if strict is None:
        strict = get_settings().strict_closest_details
    try:
        candidates = await load_candidates(fetcher, url)
        result = resolve_closest(user, candidates, strict=strict)
    except CoolingCentreError as e:
        logger.error("Nearest-centre lookup for (%.4f, %.4f) aborted: %s", user.latitude, user.longitude, e)
        raise

    if result is None:
        logger.warning("No eligible cooling centre for (%.4f, %.4f)", user.latitude, user.longitude)
    else:
        logger.info("Nearest cooling centre: %s (%.3f km)", result.candidate.name, result.distance_km)
    return result


async def resolve_nearest_centre(
    coordinate_source: CoordinateSource,
    fetcher: DatasetFetcher,
    *,
    url: Optional[str] = None,
    strict: Optional[bool] = None,
) -> Optional[ClosestResult]:
    """Wait for one user location, then fetch the dataset and pick the nearest centre."""
    user = await coordinate_source.current_location()
    return await find_nearest(user, fetcher, url=url, strict=strict)


def clear_dataset_cache() -> None:
    _dataset_cache.clear()
