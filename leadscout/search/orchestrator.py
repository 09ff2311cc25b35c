"""Business search pipeline: quota, geocode, collect, filter, enrich, score, rank, record."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Mapping, Optional

import requests

from leadscout.core.config import Settings
from leadscout.core.db import UsageStore
from leadscout.core.errors import LocationNotFoundError, UpstreamUnavailableError, ValidationError
from leadscout.etl.transform import parse_coordinate
from leadscout.models import Coordinate, SearchOutcome, SearchQuery
from leadscout.search.collector import collect_candidates, deduplicate
from leadscout.search.enricher import enrich_candidates
from leadscout.search.geo import filter_by_radius
from leadscout.search.quota import ensure_quota
from leadscout.search.ranking import rank
from leadscout.search.scoring import ScoreJitter, score_business
from leadscout.vendors.google_places import GooglePlacesError, PlacesClient

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_MILES = 10
DEFAULT_MAX_RESULTS = 20


def build_query(payload: Mapping[str, Any], user_id: Any) -> SearchQuery:
    """Validate a request body into a SearchQuery; raises ValidationError."""
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")
    location = str(payload.get("location") or "").strip()
    category = str(payload.get("businessType") or "").strip()
    if not location or not category:
        raise ValidationError("Location and business type are required")

    try:
        radius = float(payload.get("radius", DEFAULT_RADIUS_MILES))
    except (TypeError, ValueError) as exc:
        raise ValidationError("radius must be numeric") from exc
    if not radius > 0:
        raise ValidationError("radius must be positive")

    max_results_raw = payload.get("maxResults", DEFAULT_MAX_RESULTS)
    try:
        max_results = int(max_results_raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError("maxResults must be an integer") from exc
    if max_results <= 0:
        raise ValidationError("maxResults must be positive")

    if user_id is None:
        raise ValidationError("requesting user is required")

    return SearchQuery(
        location_text=location,
        category_text=category,
        radius_miles=radius,
        max_results=max_results,
        requesting_user_id=user_id,
    )


def resolve_location(client: PlacesClient, location_text: str) -> Coordinate:
    try:
        results = client.geocode(location_text)
    except (requests.RequestException, GooglePlacesError, ValueError) as exc:
        logger.error("Geocoding failed for %r: %s", location_text, exc)
        raise UpstreamUnavailableError() from exc

    for result in results:
        coordinate = parse_coordinate(result)
        if coordinate is not None:
            return coordinate
    raise LocationNotFoundError(f"Location not found: {location_text}")


class BusinessSearchService:
    """Runs one search per call; holds no per-request state."""

    def __init__(self, client: PlacesClient, store: UsageStore, settings: Settings) -> None:
        self.client = client
        self.store = store
        self.settings = settings

    def _jitter(self) -> Optional[ScoreJitter]:
        if self.settings.score_jitter <= 0:
            return None
        return ScoreJitter(self.settings.score_jitter, self.settings.score_jitter_seed)

    def search(self, query: SearchQuery) -> SearchOutcome:
        deadline: Optional[float] = None
        if self.settings.request_deadline_seconds > 0:
            deadline = time.monotonic() + self.settings.request_deadline_seconds

        ensure_quota(self.store, query.requesting_user_id, self.settings.allowance_for)

        origin = resolve_location(self.client, query.location_text)
        logger.info(
            "Searching %r within %.1f mi of %r (%.5f, %.5f)",
            query.category_text,
            query.radius_miles,
            query.location_text,
            origin.latitude,
            origin.longitude,
        )

        collection = collect_candidates(self.client, query, origin, deadline=deadline)
        unique = deduplicate(collection.candidates)
        nearby = filter_by_radius(unique, origin, query.radius_miles)
        logger.info(
            "Collected %d candidates (%d unique, %d in radius) via %s",
            len(collection.candidates),
            len(unique),
            len(nearby),
            ",".join(collection.succeeded),
        )

        enrichment = enrich_candidates(
            self.client,
            nearby,
            max_workers=self.settings.detail_concurrency,
            deadline=deadline,
        )
        jitter = self._jitter()
        scored = [score_business(business, jitter) for business in enrichment.businesses]
        ranked = rank(scored, query.max_results)

        self.store.record_search(
            user_id=query.requesting_user_id,
            location=query.location_text,
            business_type=query.category_text,
            radius=query.radius_miles,
            max_results=query.max_results,
            results_count=len(ranked),
        )

        return SearchOutcome(
            results=ranked,
            total_found=len(scored),
            strategies_succeeded=len(collection.succeeded),
            strategies_failed=len(collection.failed),
            fallback_count=len(enrichment.failures),
        )

    def handle(self, payload: Mapping[str, Any], user_id: Any) -> Dict[str, Any]:
        """Validate and run a search, returning the success payload."""
        return self.search(build_query(payload, user_id)).to_payload()
