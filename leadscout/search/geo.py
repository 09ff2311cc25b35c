"""Great-circle distance and radius filtering."""

from __future__ import annotations

import logging
import math
from typing import Iterable, List

from leadscout.models import CandidateRef, Coordinate, DistancedCandidate

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
MILES_PER_KM = 0.621371


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_miles(origin: Coordinate, point: Coordinate) -> float:
    return haversine_km(origin.latitude, origin.longitude, point.latitude, point.longitude) * MILES_PER_KM


def filter_by_radius(
    candidates: Iterable[CandidateRef],
    origin: Coordinate,
    radius_miles: float,
) -> List[DistancedCandidate]:
    """Keep candidates within ``radius_miles`` of ``origin`` (inclusive), annotated with distance.

    Candidates without a coordinate cannot be placed and are dropped.
    """
    kept: List[DistancedCandidate] = []
    dropped_no_coord = 0
    dropped_far = 0
    for candidate in candidates:
        if candidate.coordinate is None:
            dropped_no_coord += 1
            continue
        miles = distance_miles(origin, candidate.coordinate)
        if miles > radius_miles:
            dropped_far += 1
            continue
        kept.append(DistancedCandidate(candidate=candidate, distance_miles=miles))

    logger.info(
        "Distance filter kept %d candidates (dropped %d outside %.1f mi, %d without coordinates)",
        len(kept),
        dropped_far,
        radius_miles,
        dropped_no_coord,
    )
    return kept
