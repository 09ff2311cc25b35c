"""Digital-presence opportunity score.

A business starts at ``BASE_SCORE`` and gains points for every weak or missing
signal (no website, no phone, poor or few reviews, few photos, no listed hours,
not operational). The sum is clamped to ``[SCORE_MIN, SCORE_MAX]`` and mapped
to a tier with :func:`opportunity_tier`.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Optional

from leadscout.etl.transform import PHONE_UNAVAILABLE
from leadscout.models import NormalizedBusiness

BASE_SCORE = 30
SCORE_MIN = 25
SCORE_MAX = 95

NO_WEBSITE_POINTS = 25
NO_PHONE_POINTS = 18
LOW_RATING_POINTS = 15
FEW_REVIEWS_POINTS = 18
FEW_PHOTOS_POINTS = 10
NO_HOURS_POINTS = 10
NOT_OPERATIONAL_POINTS = 20

LOW_RATING_THRESHOLD = 3.5
FEW_REVIEWS_THRESHOLD = 15
FEW_PHOTOS_THRESHOLD = 3

HIGH_TIER_ABOVE = 70
MEDIUM_TIER_ABOVE = 50


class ScoreJitter:
    """Seeded random offset applied before clamping; opt-in only."""

    def __init__(self, amplitude: int, seed: Optional[int] = None) -> None:
        if amplitude < 0:
            raise ValueError("jitter amplitude must be non-negative")
        self.amplitude = amplitude
        self._rng = random.Random(seed)

    def offset(self) -> int:
        if not self.amplitude:
            return 0
        return self._rng.randint(-self.amplitude, self.amplitude)


@dataclass(frozen=True)
class ScoreBreakdown:
    raw: int
    score: int
    tier: str


def opportunity_tier(score: int) -> str:
    if score > HIGH_TIER_ABOVE:
        return "high"
    if score > MEDIUM_TIER_ABOVE:
        return "medium"
    return "low"


def raw_score(business: NormalizedBusiness) -> int:
    score = BASE_SCORE
    if business.website is None:
        score += NO_WEBSITE_POINTS
    if business.phone == PHONE_UNAVAILABLE:
        score += NO_PHONE_POINTS
    if (business.rating or 0) < LOW_RATING_THRESHOLD:
        score += LOW_RATING_POINTS
    if (business.review_count or 0) < FEW_REVIEWS_THRESHOLD:
        score += FEW_REVIEWS_POINTS
    if (business.photos_count or 0) < FEW_PHOTOS_THRESHOLD:
        score += FEW_PHOTOS_POINTS
    if business.hours_text is None:
        score += NO_HOURS_POINTS
    if (business.business_status or "").lower() != "operational":
        score += NOT_OPERATIONAL_POINTS
    return score


def compute_score(business: NormalizedBusiness, jitter: Optional[ScoreJitter] = None) -> ScoreBreakdown:
    raw = raw_score(business)
    if jitter is not None:
        raw += jitter.offset()
    score = max(SCORE_MIN, min(SCORE_MAX, raw))
    return ScoreBreakdown(raw=raw, score=score, tier=opportunity_tier(score))


def score_business(business: NormalizedBusiness, jitter: Optional[ScoreJitter] = None) -> NormalizedBusiness:
    """Return a copy of ``business`` carrying its opportunity score and tier."""
    breakdown = compute_score(business, jitter)
    return replace(business, opportunity_score=breakdown.score, opportunity_tier=breakdown.tier)
