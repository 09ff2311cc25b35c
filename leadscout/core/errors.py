"""Error taxonomy surfaced by the business search pipeline."""

from __future__ import annotations

from typing import Any, Dict, Optional


class SearchError(RuntimeError):
    """Base class for failures reported to the caller as ``{error, errorKind}``."""

    error_kind = "SearchError"
    default_message = "Search failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message, "errorKind": self.error_kind}


class ValidationError(SearchError):
    error_kind = "ValidationError"
    default_message = "Invalid request"


class AuthError(SearchError):
    error_kind = "AuthError"
    default_message = "Authentication required"


class QuotaExceededError(SearchError):
    error_kind = "QuotaExceededError"

    def __init__(self, used: int, limit: int, message: Optional[str] = None) -> None:
        self.used = used
        self.limit = limit
        super().__init__(message or f"Monthly search limit exceeded. Used: {used}/{limit}")

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload.update(used=self.used, limit=self.limit)
        return payload


class LocationNotFoundError(SearchError):
    error_kind = "LocationNotFoundError"
    default_message = "Location not found"


class UpstreamUnavailableError(SearchError):
    error_kind = "UpstreamUnavailableError"
    default_message = "Business search is temporarily unavailable"


class RequestTimeoutError(UpstreamUnavailableError):
    default_message = "Business search timed out"


class PerItemDetailError(SearchError):
    """A single details fetch failed; recovered by the enricher, never returned."""

    error_kind = "PerItemDetailError"

    def __init__(self, provider_id: str, cause: BaseException) -> None:
        self.provider_id = provider_id
        self.cause = cause
        super().__init__(f"Details unavailable for {provider_id}: {cause}")
