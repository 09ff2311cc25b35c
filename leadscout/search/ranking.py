"""Deterministic ordering and truncation of scored businesses."""

from __future__ import annotations

from typing import Iterable, List

from leadscout.core.errors import ValidationError
from leadscout.models import NormalizedBusiness


def rank_key(business: NormalizedBusiness):
    return (-(business.opportunity_score or 0), business.distance_miles, business.name)


def rank(businesses: Iterable[NormalizedBusiness], max_results: int) -> List[NormalizedBusiness]:
    """Highest score first; ties go to the closer business, then by name."""
    if max_results <= 0:
        raise ValidationError("maxResults must be positive")
    return sorted(businesses, key=rank_key)[:max_results]
