"""Per-candidate details enrichment with a fallback record on failure."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from leadscout.core.concurrency import gather_settled
from leadscout.core.errors import PerItemDetailError
from leadscout.etl.transform import fallback_business, to_business
from leadscout.models import DistancedCandidate, NormalizedBusiness
from leadscout.vendors.google_places import PlacesClient

logger = logging.getLogger(__name__)


@dataclass
class Enrichment:
    businesses: List[NormalizedBusiness]
    failures: List[PerItemDetailError]


def _fetch(client: PlacesClient, item: DistancedCandidate) -> Callable[[], NormalizedBusiness]:
    def run() -> NormalizedBusiness:
        details = client.place_details(item.candidate.provider_id)
        return to_business(details, item)

    return run


def enrich_candidates(
    client: PlacesClient,
    items: Sequence[DistancedCandidate],
    *,
    max_workers: int = 8,
    deadline: Optional[float] = None,
) -> Enrichment:
    """Fetch details once per candidate; every candidate yields exactly one record."""
    outcomes = gather_settled([_fetch(client, item) for item in items], max_workers=max_workers, deadline=deadline)

    businesses: List[NormalizedBusiness] = []
    failures: List[PerItemDetailError] = []
    for item, outcome in zip(items, outcomes):
        if outcome.ok:
            businesses.append(outcome.value)
            continue
        failure = PerItemDetailError(item.candidate.provider_id, outcome.error)
        logger.warning("Falling back to search data: %s", failure)
        failures.append(failure)
        businesses.append(fallback_business(item))

    if failures:
        logger.info("Details enrichment used fallback for %d of %d candidates", len(failures), len(items))
    return Enrichment(businesses=businesses, failures=failures)
