"""Monthly search allowance check, run before any paid Places call."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from leadscout.core.db import UsageStore
from leadscout.core.errors import QuotaExceededError
from leadscout.models import QuotaStatus

logger = logging.getLogger(__name__)


def ensure_quota(
    store: UsageStore,
    user_id: Any,
    allowance_for: Callable[[str], Optional[int]],
    requested_units: int = 1,
) -> QuotaStatus:
    """Raise QuotaExceededError unless ``used + requested_units`` fits the plan's allowance.

    Two concurrent requests may both pass right at the limit; the count is read
    without locking.
    """
    plan_type = store.get_active_plan(user_id)
    if not plan_type:
        logger.info("User %s has no active subscription", user_id)
        raise QuotaExceededError(used=0, limit=0, message="No active subscription found")

    limit = allowance_for(plan_type)
    if limit is None:
        return QuotaStatus(plan_type=plan_type, used=0, limit=None)

    used = store.count_monthly_usage(user_id)
    if used + requested_units > limit:
        logger.info("User %s over quota: %d/%d on plan %s", user_id, used, limit, plan_type)
        raise QuotaExceededError(used=used, limit=limit)
    return QuotaStatus(plan_type=plan_type, used=used, limit=limit)
