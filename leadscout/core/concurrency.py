"""Fan-out helper: run independent calls, keep every success, capture every failure."""

from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from leadscout.core.errors import RequestTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Settled(Generic[T]):
    """Outcome of one call: exactly one of ``value`` / ``error`` is meaningful."""

    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def remaining(deadline: Optional[float]) -> Optional[float]:
    """Seconds left until a ``time.monotonic()`` deadline, or None when unbounded."""
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())


def gather_settled(
    calls: Sequence[Callable[[], T]],
    *,
    max_workers: int,
    deadline: Optional[float] = None,
) -> List[Settled[T]]:
    """Run ``calls`` concurrently and return their outcomes in input order.

    An exception raised by one call is stored on its ``Settled`` entry and never
    affects the others. When ``deadline`` passes before every call finishes,
    calls that have not started are cancelled and ``RequestTimeoutError`` is
    raised; calls already running are abandoned and bounded by their own
    transport timeouts.
    """
    if not calls:
        return []

    executor = ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(calls))))
    futures: List[Future] = [executor.submit(call) for call in calls]
    pending = set(futures)
    try:
        while pending:
            timeout = remaining(deadline)
            if timeout is not None and timeout <= 0:
                break
            _, pending = wait(pending, timeout=timeout, return_when=FIRST_COMPLETED)
        if pending:
            for future in pending:
                future.cancel()
            logger.warning("Deadline reached with %d of %d calls unfinished", len(pending), len(futures))
            raise RequestTimeoutError()
    finally:
        executor.shutdown(wait=not pending, cancel_futures=True)

    settled: List[Settled[T]] = []
    for future in futures:
        error = future.exception()
        if error is not None:
            settled.append(Settled(error=error))
        else:
            settled.append(Settled(value=future.result()))
    return settled
