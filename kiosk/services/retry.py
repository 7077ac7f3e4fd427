import asyncio
from typing import Awaitable, Callable, TypeVar

from kiosk.core.errors import CheckoutError
from kiosk.core.logger import get_logger

logger = get_logger("retry")

T = TypeVar("T")


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int,
    backoff: float,
    label: str,
) -> T:
    """
    Run ``operation``, retrying only failures flagged ``retryable``
    (UpstreamUnavailable) up to ``attempts`` extra times with exponential backoff.
    Everything else is raised on the first occurrence.
    """
    retries_left = max(attempts, 0)
    delay = backoff
    while True:
        try:
            return await operation()
        except CheckoutError as e:
            if not e.retryable or retries_left == 0:
                raise
            retries_left -= 1
            logger.warning(f"{label} failed ({e.kind.value}), retrying in {delay:.2f}s")
            if delay > 0:
                await asyncio.sleep(delay)
            delay *= 2
