"""Utilities for transforming Google Places responses into pipeline records."""

import logging
from typing import Any, Dict, Iterable, Optional, Tuple
from urllib.parse import urlparse

from leadscout.models import CandidateRef, Coordinate, DistancedCandidate, NormalizedBusiness

logger = logging.getLogger(__name__)

PHONE_UNAVAILABLE = "Phone not available"
ADDRESS_UNAVAILABLE = "Address not available"
DEFAULT_CATEGORY = "business"
DEFAULT_BUSINESS_STATUS = "OPERATIONAL"
MAP_URL_TEMPLATE = "https://www.google.com/maps/place/?q=place_id:{place_id}"

_IGNORE_TYPES = {"point_of_interest", "establishment", "political", "premise"}
# Listing pages on the map provider are not the business's own site.
_MAP_PROVIDER_HOSTS = ("maps.google.com", "business.google.com", "goo.gl", "g.page")
_MAP_PATH_HOSTS = ("google.com", "www.google.com")


def _extract_primary_type(types: Iterable[str]) -> Optional[str]:
    for type_name in types or []:
        if type_name not in _IGNORE_TYPES:
            return type_name
    return None


def _category(types: Iterable[str]) -> str:
    primary = _extract_primary_type(types)
    return primary.replace("_", " ") if primary else DEFAULT_CATEGORY


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Any) -> Optional[int]:
    try:
        if value is None:
            return None
        return int(value)
    except (TypeError, ValueError):
        return None


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def parse_coordinate(result: Dict[str, Any]) -> Optional[Coordinate]:
    location = (result.get("geometry") or {}).get("location") or {}
    lat = _safe_float(location.get("lat"))
    lng = _safe_float(location.get("lng"))
    if lat is None or lng is None:
        return None
    return Coordinate(latitude=lat, longitude=lng)


def to_candidate(result: Dict[str, Any], strategy: str) -> Optional[CandidateRef]:
    """Build a CandidateRef from one search result; results without a place_id are skipped."""
    place_id = _strip_or_none(result.get("place_id"))
    if not place_id:
        logger.debug("Skipping %s result without place_id: %s", strategy, result.get("name"))
        return None
    return CandidateRef(
        provider_id=place_id,
        name=_strip_or_none(result.get("name")) or "",
        coordinate=parse_coordinate(result),
        raw_attributes=result,
        strategy=strategy,
    )


def sanitize_website(raw_url: Any) -> Optional[str]:
    """Return the business's own website, or None for blanks and map-provider links."""
    url = _strip_or_none(raw_url)
    if not url:
        return None
    parsed = urlparse(url if "://" in url else f"http://{url}")
    host = (parsed.hostname or "").lower()
    if not host:
        return None
    for provider in _MAP_PROVIDER_HOSTS:
        if host == provider or host.endswith(f".{provider}"):
            logger.debug("Discarding map-provider website %s", url)
            return None
    if host in _MAP_PATH_HOSTS and parsed.path.startswith("/maps"):
        logger.debug("Discarding map-provider website %s", url)
        return None
    return url


def pick_phone(details: Dict[str, Any]) -> str:
    return (
        _strip_or_none(details.get("formatted_phone_number"))
        or _strip_or_none(details.get("international_phone_number"))
        or PHONE_UNAVAILABLE
    )


def weekly_hours(details: Dict[str, Any]) -> Optional[Tuple[str, ...]]:
    weekday_text = (details.get("opening_hours") or {}).get("weekday_text")
    if not weekday_text:
        return None
    return tuple(str(line) for line in weekday_text)


def map_url(place_id: str, details: Optional[Dict[str, Any]] = None) -> str:
    provided = _strip_or_none((details or {}).get("url"))
    return provided or MAP_URL_TEMPLATE.format(place_id=place_id)


def _address(*sources: Dict[str, Any]) -> str:
    for source in sources:
        for key in ("formatted_address", "vicinity"):
            value = _strip_or_none(source.get(key))
            if value:
                return value
    return ADDRESS_UNAVAILABLE


def to_business(details: Dict[str, Any], item: DistancedCandidate) -> NormalizedBusiness:
    """Normalise a successful details response for one candidate."""
    candidate = item.candidate
    raw = candidate.raw_attributes
    return NormalizedBusiness(
        provider_id=candidate.provider_id,
        name=_strip_or_none(details.get("name")) or candidate.name,
        category=_category(details.get("types") or raw.get("types") or []),
        address=_address(details, raw),
        phone=pick_phone(details),
        website=sanitize_website(details.get("website")),
        rating=_safe_float(details.get("rating")) or 0.0,
        review_count=_safe_int(details.get("user_ratings_total")) or 0,
        hours_text=weekly_hours(details),
        photos_count=len(details.get("photos") or []),
        business_status=details.get("business_status") or raw.get("business_status") or DEFAULT_BUSINESS_STATUS,
        price_level=_safe_int(details.get("price_level")),
        distance_miles=item.distance_miles,
        map_url=map_url(candidate.provider_id, details),
        enriched=True,
    )


def fallback_business(item: DistancedCandidate) -> NormalizedBusiness:
    """Lower-confidence record built from search data alone after a failed details fetch."""
    candidate = item.candidate
    raw = candidate.raw_attributes
    return NormalizedBusiness(
        provider_id=candidate.provider_id,
        name=candidate.name,
        category=_category(raw.get("types") or []),
        address=_address(raw),
        phone=PHONE_UNAVAILABLE,
        website=None,
        rating=_safe_float(raw.get("rating")) or 0.0,
        review_count=_safe_int(raw.get("user_ratings_total")) or 0,
        hours_text=None,
        photos_count=0,
        business_status=raw.get("business_status") or DEFAULT_BUSINESS_STATUS,
        price_level=_safe_int(raw.get("price_level")),
        distance_miles=item.distance_miles,
        map_url=map_url(candidate.provider_id),
        enriched=False,
    )
