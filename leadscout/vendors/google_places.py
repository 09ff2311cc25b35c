"""Client utilities for the Google Maps Geocoding and Places web services."""

import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)
_BASE_URL = "https://maps.googleapis.com/maps/api"
_OK_STATUSES = {"OK", "ZERO_RESULTS"}

METERS_PER_MILE = 1609.34
DETAIL_FIELDS = (
    "place_id,name,formatted_address,formatted_phone_number,international_phone_number,"
    "website,opening_hours,price_level,photos,url,rating,user_ratings_total,business_status,types"
)


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns a non-successful response."""

    def __init__(self, status: Optional[str], error_message: Optional[str] = None) -> None:
        self.status = status
        self.error_message = error_message
        super().__init__(error_message or status or "unknown Places API error")


class PlacesClient:
    """Thin wrapper over the legacy JSON endpoints; one instance per process, passed explicitly."""

    def __init__(self, api_key: str, session: Optional[requests.Session] = None, timeout: float = 10) -> None:
        if not api_key:
            raise ValueError("A Google Places API key is required")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {**params, "key": self.api_key}
        response = self.session.get(f"{_BASE_URL}/{path}", params=params, timeout=self.timeout)
        response.raise_for_status()
        payload = response.json()
        status = payload.get("status")
        if status not in _OK_STATUSES:
            logger.error("%s failed: status=%s, error_message=%s", path, status, payload.get("error_message"))
            raise GooglePlacesError(status, payload.get("error_message"))
        return payload

    def geocode(self, address: str) -> List[Dict[str, Any]]:
        payload = self._get("geocode/json", {"address": address})
        return payload.get("results") or []

    def nearby_search(self, latitude: float, longitude: float, radius_m: float, keyword: str) -> List[Dict[str, Any]]:
        params = {
            "location": f"{latitude},{longitude}",
            "radius": round(radius_m),
            "keyword": keyword,
        }
        return self._get("place/nearbysearch/json", params).get("results") or []

    def text_search(
        self,
        query: str,
        radius_m: Optional[float] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"query": query}
        if radius_m is not None:
            params["radius"] = round(radius_m)
        if latitude is not None and longitude is not None:
            params["location"] = f"{latitude},{longitude}"
        return self._get("place/textsearch/json", params).get("results") or []

    def place_details(self, place_id: str, fields: str = DETAIL_FIELDS) -> Dict[str, Any]:
        payload = self._get("place/details/json", {"place_id": place_id, "fields": fields})
        result = payload.get("result")
        if not result:
            raise GooglePlacesError(payload.get("status"), f"no details returned for {place_id}")
        return result

    def autocomplete_cities(self, text: str, country: str = "us") -> List[Dict[str, Any]]:
        params = {"input": text, "types": "(cities)", "components": f"country:{country}"}
        return self._get("place/autocomplete/json", params).get("predictions") or []
