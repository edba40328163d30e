# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: retryable unit of work.

An operation is a closure that reloads its documents, checks, mutates and
saves. When a save loses a version race the whole closure is re-run against
fresh state, so every check sees the concurrent writer's result.
"""

from typing import Callable, Optional, TypeVar

from clubflow.core.config import settings
from clubflow.core.errors import ConcurrencyConflict
from clubflow.core.logging import get_logger
from clubflow.metrics import CONCURRENCY_RETRIES

logger = get_logger(__name__)

T = TypeVar("T")


def retry_on_conflict(
    operation: Callable[[], T],
    name: str,
    attempts: Optional[int] = None,
) -> T:
    """Run ``operation``; re-run it on ConcurrencyConflict up to ``attempts`` times."""
    max_attempts = max(1, attempts or settings.WRITE_RETRY_ATTEMPTS)
    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except ConcurrencyConflict as exc:
            if attempt == max_attempts:
                logger.error("%s gave up after %d attempts: %s", name, attempt, exc)
                raise
            CONCURRENCY_RETRIES.labels(operation=name).inc()
            logger.info("%s retrying after stale write (attempt %d): %s", name, attempt, exc)
    raise AssertionError("unreachable")
