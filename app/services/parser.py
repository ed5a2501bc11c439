"""Turn the raw cooling-centre JSON into validated Candidate records."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from app.models import Candidate
from app.services.errors import DeserializationFailure, MalformedEntry

logger = logging.getLogger(__name__)

LIBRARY_DESCRIPTION = "Library"
NULL_PHONE = "<null>"

_PREVIEW_CHARS = 120


def _is_number(value: Any) -> bool:
    # bool is an int subclass, but `true` is not a coordinate
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _optional_str(raw: Dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    return value if isinstance(value, str) else None


def normalize_name(name: str, description: str) -> str:
    if description == LIBRARY_DESCRIPTION:
        return f"{name} {description}"
    return name


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    if phone == NULL_PHONE:
        return ""
    return phone


def decode_payload(body: bytes) -> List[Any]:
    """Decode the dataset body, which must be a top-level JSON array."""
    try:
        data = json.loads(body)
    # JSONDecodeError and UnicodeDecodeError are ValueErrors, and so is the
    # integer digit-limit error raised by json.loads
    except ValueError as e:
        preview = body[:_PREVIEW_CHARS].decode("utf-8", errors="replace")
        raise DeserializationFailure(f"Dataset is not valid JSON: {e}", preview=preview) from e

    if not isinstance(data, list):
        raise DeserializationFailure(f"Expected a JSON array, got {type(data).__name__}")
    return data


def parse_candidate(raw: Any) -> Candidate:
    if not isinstance(raw, dict):
        raise MalformedEntry(f"entry is {type(raw).__name__}, not an object")

    lon = raw.get("lon")
    lat = raw.get("lat")
    name = raw.get("locationName")
    description = raw.get("locationDesc")

    if not _is_number(lon):
        raise MalformedEntry("missing or non-numeric 'lon'")
    if not _is_number(lat):
        raise MalformedEntry("missing or non-numeric 'lat'")
    if not isinstance(name, str):
        raise MalformedEntry("missing or non-string 'locationName'")
    if not isinstance(description, str):
        raise MalformedEntry("missing or non-string 'locationDesc'")

    try:
        latitude = float(lat)
        longitude = float(lon)
    except OverflowError as e:
        raise MalformedEntry("coordinate too large for a float") from e

    try:
        return Candidate(
            name=normalize_name(name, description),
            description=description,
            latitude=latitude,
            longitude=longitude,
            address=_optional_str(raw, "address"),
            phone=normalize_phone(_optional_str(raw, "phone")),
        )
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise MalformedEntry(f"invalid value for {fields}") from e


def parse_candidates(raw: Iterable[Any]) -> List[Candidate]:
    """Validate every entry, dropping (and logging) the ones that don't qualify."""
    candidates: List[Candidate] = []
    skipped = 0
    for index, entry in enumerate(raw):
        try:
            candidates.append(parse_candidate(entry))
        except MalformedEntry as e:
            skipped += 1
            logger.warning("Skipping dataset entry #%d: %s", index, e)

    if skipped:
        logger.info("Parsed %d cooling centres (%d entries skipped)", len(candidates), skipped)
    return candidates
