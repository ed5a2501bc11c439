"""Failure types raised along the nearest-centre pipeline."""

from __future__ import annotations

from typing import Optional


class CoolingCentreError(Exception):
    """Base class for every pipeline failure."""


class MalformedEntry(CoolingCentreError, ValueError):
    """A single dataset entry failed validation. Recoverable: the entry is skipped."""


class IncompleteClosestCandidate(CoolingCentreError):
    """The nearest centre lacks an address or phone number (strict mode only)."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Closest centre '{name}' is missing address or phone details")
        self.name = name


class TransportFailure(CoolingCentreError):
    """The dataset could not be downloaded."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class NonSuccessStatus(TransportFailure):
    def __init__(self, url: str, status: int) -> None:
        super().__init__(url, f"HTTP {status}")
        self.status = status


class DeserializationFailure(CoolingCentreError, ValueError):
    """The response body is not a JSON array."""

    def __init__(self, reason: str, *, preview: Optional[str] = None) -> None:
        super().__init__(reason)
        self.preview = preview


class LocationNotFound(CoolingCentreError, ValueError):
    pass
