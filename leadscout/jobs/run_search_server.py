"""HTTP entrypoint exposing the business search pipeline (Cloud Run friendly)."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Tuple

from flask import Flask, current_app, jsonify, request

from leadscout.core.auth import SessionVerifier, token_from_request
from leadscout.core.config import Settings, get_settings
from leadscout.core.db import UsageStore
from leadscout.core.errors import QuotaExceededError, SearchError, ValidationError
from leadscout.etl.transform import to_business
from leadscout.models import CandidateRef, DistancedCandidate, SessionUser
from leadscout.search.orchestrator import BusinessSearchService
from leadscout.vendors.google_places import PlacesClient

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    "ValidationError": 400,
    "AuthError": 401,
    "QuotaExceededError": 429,
    "LocationNotFoundError": 404,
    "UpstreamUnavailableError": 502,
}
AUTOCOMPLETE_MIN_CHARS = 2
AUTOCOMPLETE_LIMIT = 5


def _error_response(exc: SearchError) -> Tuple[Any, int]:
    return jsonify(exc.to_payload()), _STATUS_BY_KIND.get(exc.error_kind, 500)


def _internal_error() -> Tuple[Any, int]:
    return jsonify({"success": False, "error": "Search failed", "errorKind": "InternalError"}), 500


def _current_user() -> SessionUser:
    verifier: SessionVerifier = current_app.config["SESSION_VERIFIER"]
    return verifier.verify(token_from_request(request.headers, request.cookies))


def create_app(
    settings: Optional[Settings] = None,
    *,
    client: Optional[PlacesClient] = None,
    store: Optional[UsageStore] = None,
    verifier: Optional[SessionVerifier] = None,
) -> Flask:
    """Build the Flask app; collaborators default to ones derived from ``settings``."""
    settings = settings or get_settings()
    client = client or PlacesClient(settings.search_api_key, timeout=settings.places_timeout_seconds)
    store = store or UsageStore.from_dsn(settings.database_url, maxconn=settings.db_pool_max)
    verifier = verifier or SessionVerifier(settings.session_signing_key)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.config["PLACES_CLIENT"] = client
    app.config["USAGE_STORE"] = store
    app.config["SESSION_VERIFIER"] = verifier
    app.config["SEARCH_SERVICE"] = BusinessSearchService(client, store, settings)

    @app.errorhandler(SearchError)
    def handle_search_error(exc: SearchError) -> Tuple[Any, int]:
        return _error_response(exc)

    @app.get("/")
    def root() -> Any:
        """Simple root to avoid 404 on GET /"""
        return "ok", 200

    @app.get("/healthz")
    def healthcheck() -> Any:
        """Lightweight health endpoint; does not touch the database."""
        return (
            jsonify(
                {
                    "status": "ok",
                    "worker_port_config": settings.worker_port,
                    "revision": os.getenv("K_REVISION", "unknown"),
                    "region": os.getenv("X_GOOGLE_RUNTIMEREGION", "unknown"),
                }
            ),
            200,
        )

    @app.get("/healthz/db")
    def database_health() -> Any:
        try:
            info = store.ping()
        except Exception:  # noqa: BLE001
            logger.exception("Database health check failed")
            return jsonify({"success": False, "error": "database unavailable"}), 500
        return jsonify({"success": True, **info}), 200

    @app.post("/search/businesses")
    def search_businesses() -> Any:
        """
        Run a business search for the signed-in user.
        Required JSON fields: location, businessType
        Optional: radius (miles, default 10), maxResults (default 20)
        """
        payload: Dict[str, Any] = request.get_json(silent=True) or {}
        user = _current_user()
        service: BusinessSearchService = current_app.config["SEARCH_SERVICE"]
        try:
            body = service.handle(payload, user.user_id)
        except QuotaExceededError as exc:
            logger.info("Search rejected for user %s: %s", user.user_id, exc)
            return _error_response(exc)
        except SearchError as exc:
            logger.warning("Business search failed for user %s: %s", user.user_id, exc)
            return _error_response(exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Business search crashed: %s", exc)
            return _internal_error()
        return jsonify(body), 200

    @app.get("/places/autocomplete")
    def autocomplete() -> Any:
        """City suggestions for the location box."""
        _current_user()
        text = (request.args.get("input") or "").strip()
        if len(text) < AUTOCOMPLETE_MIN_CHARS:
            raise ValidationError(f"input parameter required (minimum {AUTOCOMPLETE_MIN_CHARS} characters)")
        try:
            predictions = client.autocomplete_cities(text)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Autocomplete failed for %r: %s", text, exc)
            return jsonify({"success": False, "error": "Autocomplete failed", "errorKind": "UpstreamUnavailableError"}), 502

        cleaned = []
        for prediction in predictions[:AUTOCOMPLETE_LIMIT]:
            formatting = prediction.get("structured_formatting") or {}
            cleaned.append(
                {
                    "description": prediction.get("description"),
                    "placeId": prediction.get("place_id"),
                    "mainText": formatting.get("main_text") or prediction.get("description"),
                    "secondaryText": formatting.get("secondary_text") or "",
                }
            )
        return jsonify({"success": True, "predictions": cleaned}), 200

    @app.post("/place-details")
    def place_details() -> Any:
        """Normalised details for a single place."""
        _current_user()
        payload: Dict[str, Any] = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object")
        place_id = str(payload.get("placeId") or "").strip()
        if not place_id:
            raise ValidationError("placeId is required")
        try:
            details = client.place_details(place_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Place details failed for %s: %s", place_id, exc)
            return jsonify({"success": False, "error": "Place details unavailable", "errorKind": "UpstreamUnavailableError"}), 502

        item = DistancedCandidate(candidate=CandidateRef(provider_id=place_id, name=""), distance_miles=0.0)
        return jsonify({"success": True, "result": to_business(details, item).to_dict()}), 200

    return app


def main() -> None:
    """Cloud Run injects PORT; fall back to WORKER_PORT locally."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    settings = get_settings()
    port = int(os.getenv("PORT") or settings.worker_port)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)

    app = create_app(settings)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
