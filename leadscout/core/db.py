"""Database helpers for quota accounting and search history."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import psycopg2
from psycopg2 import extras, pool

logger = logging.getLogger(__name__)


_ACTIVE_PLAN = """
SELECT plan_type
FROM subscriptions
WHERE user_id = %(user_id)s AND status IN ('active', 'trialing')
ORDER BY created_at DESC
LIMIT 1;
"""

_MONTHLY_USAGE = """
SELECT COUNT(*)
FROM search_history
WHERE user_id = %(user_id)s
  AND search_timestamp >= date_trunc('month', CURRENT_TIMESTAMP);
"""

_INSERT_SEARCH_HISTORY = """
INSERT INTO search_history (
    user_id,
    location,
    business_type,
    radius,
    max_results,
    results_count
) VALUES (
    %(user_id)s,
    %(location)s,
    %(business_type)s,
    %(radius)s,
    %(max_results)s,
    %(results_count)s
);
"""

_INSERT_USAGE_ANALYTICS = """
INSERT INTO usage_analytics (
    user_id,
    action_type,
    metadata
) VALUES (
    %(user_id)s,
    %(action_type)s,
    %(metadata)s
);
"""


class UsageStore:
    """Pooled access to the tables the search pipeline reads and appends to.

    Created once by the entrypoint and passed to whoever needs it; every query
    borrows a connection for its own scope and always returns it.
    """

    def __init__(self, connection_pool: Any) -> None:
        self._pool = connection_pool

    @classmethod
    def from_dsn(cls, dsn: str, minconn: int = 1, maxconn: int = 5) -> "UsageStore":
        if not dsn:
            raise RuntimeError("DATABASE_URL is required for database connections")
        connection_pool = pool.ThreadedConnectionPool(minconn, maxconn, dsn=dsn, connect_timeout=10)
        logger.info("Database connection pool initialised")
        return cls(connection_pool)

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Context manager yielding a pooled connection."""
        conn = self._pool.getconn()
        try:
            yield conn
        finally:
            self._pool.putconn(conn)

    def close(self) -> None:
        self._pool.closeall()

    def get_active_plan(self, user_id: Any) -> Optional[str]:
        with self.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(_ACTIVE_PLAN, {"user_id": user_id})
                row = cur.fetchone()
            conn.rollback()
        return row[0] if row else None

    def count_monthly_usage(self, user_id: Any) -> int:
        with self.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(_MONTHLY_USAGE, {"user_id": user_id})
                row = cur.fetchone()
            conn.rollback()
        return int(row[0]) if row else 0

    def record_search(
        self,
        *,
        user_id: Any,
        location: str,
        business_type: str,
        radius: float,
        max_results: int,
        results_count: int,
    ) -> None:
        """Append the usage record and its analytics event in one transaction."""
        params: Dict[str, Any] = {
            "user_id": user_id,
            "location": location,
            "business_type": business_type,
            "radius": radius,
            "max_results": max_results,
            "results_count": results_count,
        }
        analytics = {
            "user_id": user_id,
            "action_type": "business_search",
            "metadata": extras.Json(
                {
                    "location": location,
                    "businessType": business_type,
                    "radius": radius,
                    "results": results_count,
                }
            ),
        }
        with self.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(_INSERT_SEARCH_HISTORY, params)
                    cur.execute(_INSERT_USAGE_ANALYTICS, analytics)
                conn.commit()
            except psycopg2.Error:
                conn.rollback()
                raise
        logger.debug("Recorded search for user %s (%d results)", user_id, results_count)

    def ping(self) -> Dict[str, Any]:
        with self.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT NOW(), (SELECT COUNT(*) FROM users)")
                now, user_count = cur.fetchone()
            conn.rollback()
        return {"database_time": now.isoformat() if hasattr(now, "isoformat") else str(now), "total_users": int(user_count)}
