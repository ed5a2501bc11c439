from __future__ import annotations

from app.models import CentreDisplay, ClosestResult, NearestCentreResponse, UserLocation


def to_display(result: ClosestResult, locality: str) -> CentreDisplay:
    centre = result.candidate
    address = centre.address or ""
    if locality:
        address = f"{address}, {locality}" if address else locality
    return CentreDisplay(
        name=centre.name,
        address=address,
        phone=centre.phone or "",
        latitude=centre.latitude,
        longitude=centre.longitude,
        distance_km=round(result.distance_km, 3),
    )


def to_response(user: UserLocation, result: ClosestResult, locality: str) -> NearestCentreResponse:
    return NearestCentreResponse(
        user_latitude=round(user.latitude, 4),
        user_longitude=round(user.longitude, 4),
        centre=to_display(result, locality),
    )
