"""Multi-strategy candidate retrieval and cross-strategy deduplication."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from leadscout.core.concurrency import gather_settled
from leadscout.core.errors import UpstreamUnavailableError
from leadscout.etl.transform import to_candidate
from leadscout.models import CandidateRef, Coordinate, SearchQuery
from leadscout.vendors.google_places import METERS_PER_MILE, PlacesClient

logger = logging.getLogger(__name__)

GENERIC_CATEGORY_WORDS = ("restaurant", "shop", "service")
NAME_MATCH_MAX_TOKENS = 3


@dataclass(frozen=True)
class Strategy:
    name: str
    run: Callable[[], List[Dict[str, Any]]]


@dataclass
class Collection:
    candidates: List[CandidateRef]
    succeeded: List[str]
    failed: List[str]


def wants_name_match(category_text: str) -> bool:
    """Name-match search is only worth a call for short, non-generic category text."""
    lowered = category_text.lower()
    if any(word in lowered for word in GENERIC_CATEGORY_WORDS):
        return False
    return len(category_text.split()) <= NAME_MATCH_MAX_TOKENS


def build_strategies(client: PlacesClient, query: SearchQuery, origin: Coordinate) -> List[Strategy]:
    radius_m = query.radius_miles * METERS_PER_MILE
    category = query.category_text

    strategies = [
        Strategy(
            "keyword",
            lambda: client.nearby_search(origin.latitude, origin.longitude, radius_m, keyword=category),
        ),
        Strategy(
            "text",
            lambda: client.text_search(f"{category} near {query.location_text}", radius_m=radius_m),
        ),
    ]
    if wants_name_match(category):
        strategies.append(
            Strategy(
                "name",
                lambda: client.text_search(
                    category,
                    radius_m=radius_m,
                    latitude=origin.latitude,
                    longitude=origin.longitude,
                ),
            )
        )
    return strategies


def collect_candidates(
    client: PlacesClient,
    query: SearchQuery,
    origin: Coordinate,
    *,
    deadline: Optional[float] = None,
) -> Collection:
    """Run every strategy, keep what succeeded, fail only when nothing did."""
    strategies = build_strategies(client, query, origin)
    outcomes = gather_settled([s.run for s in strategies], max_workers=len(strategies), deadline=deadline)

    candidates: List[CandidateRef] = []
    succeeded: List[str] = []
    failed: List[str] = []
    for strategy, outcome in zip(strategies, outcomes):
        if not outcome.ok:
            logger.warning("Search strategy %s failed: %s", strategy.name, outcome.error)
            failed.append(strategy.name)
            continue
        succeeded.append(strategy.name)
        results = outcome.value or []
        logger.info("Strategy %s returned %d results", strategy.name, len(results))
        for result in results:
            candidate = to_candidate(result, strategy.name)
            if candidate is not None:
                candidates.append(candidate)

    if not succeeded:
        logger.error("All %d search strategies failed for %r", len(strategies), query.category_text)
        raise UpstreamUnavailableError()

    return Collection(candidates=candidates, succeeded=succeeded, failed=failed)


def deduplicate(candidates: Iterable[CandidateRef]) -> List[CandidateRef]:
    """Keep the first candidate seen for each provider id, preserving order."""
    seen: Dict[str, CandidateRef] = {}
    for candidate in candidates:
        if candidate.provider_id not in seen:
            seen[candidate.provider_id] = candidate
    return list(seen.values())

