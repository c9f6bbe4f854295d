"""Bounded retry for transient storage failures.

Each attempt calls the operation again from scratch, so the operation itself
must open its own session/connection. Delays use exponential backoff with
full jitter: ``uniform(0, min(max_delay, base_delay * 2**attempt))``.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

from storefront.core.config import settings
from storefront.core.exceptions import StorageTransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient_storage_error(exc: BaseException) -> bool:
    """True for connection resets, timeouts and invalidated connections."""
    if isinstance(exc, StorageTransientError):
        return True
    if isinstance(exc, OperationalError | InterfaceError):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return isinstance(exc, ConnectionError | TimeoutError)


def backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    rand: Callable[[float, float], float] = random.uniform,
) -> float:
    """Full-jitter delay before retry number ``attempt`` (0-based)."""
    ceiling = min(max_delay, base_delay * (2**attempt))
    return rand(0.0, ceiling)


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or transient failures exhaust ``attempts``.

    Non-transient exceptions propagate immediately. Exhaustion raises
    ``StorageTransientError`` chained to the last failure.
    """
    attempts = settings.STORAGE_RETRY_ATTEMPTS if attempts is None else attempts
    base_delay = settings.STORAGE_RETRY_BASE_DELAY if base_delay is None else base_delay
    max_delay = settings.STORAGE_RETRY_MAX_DELAY if max_delay is None else max_delay
    attempts = max(1, attempts)

    last_exc: BaseException | None = None
    for attempt in range(attempts):
        try:
            return await operation()
        except Exception as exc:
            if not is_transient_storage_error(exc):
                raise
            last_exc = exc
            if attempt + 1 >= attempts:
                break
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.warning(
                "Transient storage error (attempt %d/%d), retrying in %.3fs: %s",
                attempt + 1,
                attempts,
                delay,
                exc,
            )
            await sleep(delay)

    logger.error("Storage still unavailable after %d attempts: %s", attempts, last_exc)
    raise StorageTransientError("Storage temporarily unavailable, please retry") from last_exc
