"""Core data models shared by the business search pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True, slots=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """One caller request; immutable for the lifetime of the search."""

    location_text: str
    category_text: str
    radius_miles: float
    max_results: int
    requesting_user_id: Any


@dataclass(frozen=True, slots=True)
class CandidateRef:
    """Business reference returned by one retrieval strategy, before details."""

    provider_id: str
    name: str
    coordinate: Optional[Coordinate] = None
    raw_attributes: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)
    strategy: str = ""


@dataclass(frozen=True, slots=True)
class DistancedCandidate:
    candidate: CandidateRef
    distance_miles: float


@dataclass(frozen=True, slots=True)
class NormalizedBusiness:
    """Enriched, scored business returned to the caller."""

    provider_id: str
    name: str
    category: str
    address: str
    phone: str
    website: Optional[str]
    rating: float
    review_count: int
    hours_text: Optional[Tuple[str, ...]]
    photos_count: int
    business_status: str
    price_level: Optional[int]
    distance_miles: float
    map_url: str
    enriched: bool = True
    opportunity_score: Optional[int] = None
    opportunity_tier: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "providerId": self.provider_id,
            "name": self.name,
            "category": self.category,
            "address": self.address,
            "phone": self.phone,
            "website": self.website,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "hoursText": list(self.hours_text) if self.hours_text is not None else None,
            "photosCount": self.photos_count,
            "businessStatus": self.business_status,
            "priceLevel": self.price_level,
            # Rounded down so a published distance never exceeds the search radius.
            "distanceMiles": math.floor(self.distance_miles * 10) / 10,
            "opportunityScore": self.opportunity_score,
            "opportunityTier": self.opportunity_tier,
            "mapUrl": self.map_url,
            "enriched": self.enriched,
        }


@dataclass(frozen=True, slots=True)
class QuotaStatus:
    plan_type: str
    used: int
    # None when the plan is unlimited; usage is not counted in that case.
    limit: Optional[int]


@dataclass(frozen=True, slots=True)
class SessionUser:
    user_id: Any
    plan_type: Optional[str] = None
    email: Optional[str] = None


@dataclass(slots=True)
class SearchOutcome:
    results: List[NormalizedBusiness]
    total_found: int
    strategies_succeeded: int = 0
    strategies_failed: int = 0
    fallback_count: int = 0

    @property
    def showing(self) -> int:
        return len(self.results)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "success": True,
            "results": [business.to_dict() for business in self.results],
            "totalFound": self.total_found,
            "showing": self.showing,
        }
