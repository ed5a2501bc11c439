from __future__ import annotations

import asyncio
import logging
from typing import List

import aiohttp
from fastapi import FastAPI, HTTPException, Query

from app.config import get_settings
from app.models import NearestCentreResponse, RankedCentre, UserLocation
from app.services.coordinates import NominatimCoordinateSource, StaticCoordinateSource
from app.services.display import to_response
from app.services.errors import (
    CoolingCentreError,
    DeserializationFailure,
    IncompleteClosestCandidate,
    LocationNotFound,
    NonSuccessStatus,
    TransportFailure,
)
from app.services.fetcher import AiohttpFetcher
from app.services.pipeline import find_nearest, load_candidates
from app.services.resolver import rank_by_distance

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Finds the cooling centre nearest to a location using the City of Toronto open dataset.",
)


def _upstream_error(e: CoolingCentreError) -> HTTPException:
    if isinstance(e, NonSuccessStatus):
        return HTTPException(status_code=502, detail=f"Dataset error: HTTP {e.status}")
    if isinstance(e, TransportFailure):
        return HTTPException(status_code=502, detail=f"Dataset unavailable: {e.reason}")
    if isinstance(e, DeserializationFailure):
        return HTTPException(status_code=502, detail="Dataset is not a JSON array of centres")
    if isinstance(e, IncompleteClosestCandidate):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


async def _nearest_response(session: aiohttp.ClientSession, user: UserLocation) -> NearestCentreResponse:
    try:
        result = await find_nearest(user, AiohttpFetcher(session))
    except CoolingCentreError as e:
        raise _upstream_error(e)

    if result is None:
        raise HTTPException(status_code=404, detail="No cooling centres available")
    return to_response(user, result, settings.display_locality)


@app.get("/", tags=["Root"])
async def root():
    return {"ok": True, "service": settings.app_name, "version": settings.version}


@app.get("/health", tags=["Healthcheck"])
async def health():
    return {"ok": True}


@app.get("/api/nearest", response_model=NearestCentreResponse, tags=["Api Nearest"])
async def api_nearest(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
):
    source = StaticCoordinateSource(lat, lon)
    async with aiohttp.ClientSession() as session:
        user = await source.current_location()
        return await _nearest_response(session, user)


@app.get("/api/nearest/geocode", response_model=NearestCentreResponse, tags=["Api Nearest"])
async def api_nearest_geocode(q: str = Query(..., min_length=2, description="Free-text location query")):
    async with aiohttp.ClientSession() as session:
        source = NominatimCoordinateSource(session, q)
        try:
            user = await source.current_location()
        except LocationNotFound as e:
            raise HTTPException(status_code=404, detail=str(e))
        except aiohttp.ClientResponseError as e:
            raise HTTPException(status_code=502, detail=f"Nominatim error: {e.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise HTTPException(status_code=502, detail=f"Nominatim unavailable: {str(e) or type(e).__name__}")
        return await _nearest_response(session, user)


@app.get("/api/centres", response_model=List[RankedCentre], tags=["Api Centres"])
async def api_centres(
    lat: float = Query(..., ge=-90.0, le=90.0),
    lon: float = Query(..., ge=-180.0, le=180.0),
    limit: int = Query(10, ge=1, le=100),
):
    user = UserLocation(latitude=lat, longitude=lon)
    async with aiohttp.ClientSession() as session:
        try:
            candidates = await load_candidates(AiohttpFetcher(session))
        except CoolingCentreError as e:
            raise _upstream_error(e)

    return rank_by_distance(user, candidates, limit=limit)
