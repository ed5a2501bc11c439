from __future__ import annotations

import logging
import math
from functools import reduce
from typing import Iterable, List, Optional

from app.models import Candidate, ClosestResult, RankedCentre, UserLocation
from app.services.errors import IncompleteClosestCandidate
from app.services.geo import haversine_km

logger = logging.getLogger(__name__)


def distance_to(user: UserLocation, candidate: Candidate) -> float:
    return haversine_km(user.latitude, user.longitude, candidate.latitude, candidate.longitude)


def resolve_closest(
    user: UserLocation,
    candidates: Iterable[Candidate],
    *,
    strict: bool = False,
) -> Optional[ClosestResult]:
    """Return the candidate nearest to ``user``, or None when there are none.

    Ties go to the candidate seen first. A candidate without address/phone can't
    be the answer: with ``strict`` the lookup fails with IncompleteClosestCandidate
    as soon as such a candidate becomes the nearest so far, otherwise it is passed
    over and the scan continues.
    """

    def closer(best: Optional[ClosestResult], candidate: Candidate) -> Optional[ClosestResult]:
        best_km = best.distance_km if best is not None else math.inf
        distance = distance_to(user, candidate)
        if not distance < best_km:
            return best
        if not candidate.has_details:
            if strict:
                raise IncompleteClosestCandidate(candidate.name)
            logger.debug("Passing over '%s' (%.3f km): no address/phone", candidate.name, distance)
            return best
        return ClosestResult(candidate=candidate, distance_km=distance)

    return reduce(closer, candidates, None)


def rank_by_distance(user: UserLocation, candidates: Iterable[Candidate], *, limit: int = 10) -> List[RankedCentre]:
    ranked = [
        RankedCentre(**candidate.model_dump(), distance_km=distance_to(user, candidate))
        for candidate in candidates
    ]
    ranked.sort(key=lambda c: c.distance_km)
    return ranked[: max(0, limit)]
