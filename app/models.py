from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class Candidate(BaseModel):
    """A cooling centre that passed validation and can be compared by distance."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    address: Optional[str] = None
    phone: Optional[str] = None

    @property
    def has_details(self) -> bool:
        return self.address is not None and self.phone is not None


class ClosestResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    candidate: Candidate
    distance_km: float


class RankedCentre(BaseModel):
    name: str
    description: str
    latitude: float
    longitude: float
    address: Optional[str] = None
    phone: Optional[str] = None
    distance_km: float


class CentreDisplay(BaseModel):
    name: str
    address: str
    phone: str
    latitude: float
    longitude: float
    distance_km: float


class NearestCentreResponse(BaseModel):
    user_latitude: float
    user_longitude: float
    centre: CentreDisplay
