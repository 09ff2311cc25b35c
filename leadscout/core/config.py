"""Application configuration helpers.

Credentials are only read from the environment (or a local `.env`): the Places
key is billable and the session signing key must never live in the repo.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PLAN_ALLOWANCES = "starter=100,professional=500,agency=unlimited"
DEFAULT_MONTHLY_ALLOWANCE = 100


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    search_api_key: str
    database_url: str
    session_signing_key: str
    # None means the plan has no monthly cap.
    plan_allowances: Mapping[str, Optional[int]] = field(default_factory=dict)
    worker_port: int = 9000
    places_timeout_seconds: float = 10.0
    # Must cover geocode, one strategy round and ceil(candidates / detail_concurrency)
    # detail rounds, each bounded by places_timeout_seconds.
    request_deadline_seconds: float = 120.0
    detail_concurrency: int = 8
    score_jitter: int = 0
    score_jitter_seed: Optional[int] = None
    db_pool_max: int = 5

    def allowance_for(self, plan_type: str) -> Optional[int]:
        """Monthly search allowance for a plan, falling back to the default cap."""
        plan = (plan_type or "").strip().lower()
        if plan in self.plan_allowances:
            return self.plan_allowances[plan]
        return DEFAULT_MONTHLY_ALLOWANCE


def parse_plan_allowances(raw: str) -> Dict[str, Optional[int]]:
    """Parse `plan=limit` pairs, e.g. ``starter=100,agency=unlimited``."""
    allowances: Dict[str, Optional[int]] = {}
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        plan, sep, limit_raw = chunk.partition("=")
        plan = plan.strip().lower()
        limit_raw = limit_raw.strip().lower()
        if not sep or not plan or not limit_raw:
            raise ConfigError(f"PLAN_ALLOWANCES entry {chunk!r} must look like plan=limit")
        if limit_raw == "unlimited":
            allowances[plan] = None
            continue
        try:
            limit = int(limit_raw)
        except ValueError as exc:
            raise ConfigError(f"PLAN_ALLOWANCES limit for {plan!r} must be an integer or 'unlimited'") from exc
        allowances[plan] = None if limit < 0 else limit
    return allowances


def _get_required_env(name: str) -> str:
    value = os.getenv(name, "").strip()
    if not value:
        raise ConfigError(f"{name} must be set in the environment for the search service to run.")
    return value


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be numeric, got {raw!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load, validate and cache settings to avoid repeated env lookups."""
    load_dotenv()

    search_api_key = _get_required_env("GOOGLE_PLACES_API_KEY")
    database_url = _get_required_env("DATABASE_URL")
    session_signing_key = _get_required_env("SESSION_SIGNING_KEY")
    plan_allowances = parse_plan_allowances(os.getenv("PLAN_ALLOWANCES") or DEFAULT_PLAN_ALLOWANCES)

    detail_concurrency = _get_int("DETAIL_CONCURRENCY", 8)
    if detail_concurrency < 1:
        raise ConfigError("DETAIL_CONCURRENCY must be at least 1")

    score_jitter = _get_int("SCORE_JITTER", 0)
    seed_raw = os.getenv("SCORE_JITTER_SEED")
    score_jitter_seed = _get_int("SCORE_JITTER_SEED", 0) if seed_raw else None
    if score_jitter > 0 and score_jitter_seed is None:
        logger.warning("SCORE_JITTER is enabled without SCORE_JITTER_SEED; scores will not be reproducible.")

    return Settings(
        search_api_key=search_api_key,
        database_url=database_url,
        session_signing_key=session_signing_key,
        plan_allowances=plan_allowances,
        worker_port=_get_int("WORKER_PORT", 9000),
        places_timeout_seconds=_get_float("PLACES_TIMEOUT_SECONDS", 10.0),
        request_deadline_seconds=_get_float("REQUEST_DEADLINE_SECONDS", 120.0),
        detail_concurrency=detail_concurrency,
        score_jitter=max(0, score_jitter),
        score_jitter_seed=score_jitter_seed,
        db_pool_max=_get_int("DB_POOL_MAX", 5),
    )
