# app/core/retry.py
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from app.core.config import DB_QUERY_TIMEOUT, DB_RETRY_ATTEMPTS, DB_RETRY_DELAY
from app.core.exceptions import TimedOut

logger = logging.getLogger(__name__)


async def with_timeout(awaitable: Awaitable[Any], timeout: float) -> Any:
    """
    Race an awaitable against `timeout` seconds.

    The awaiting task is cancelled on expiry; a statement already sent to
    the database may still complete on the server side.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError:
        raise TimedOut(f"Operation timed out after {timeout:g}s")


async def run_once(awaitable: Awaitable[Any], timeout: float = DB_QUERY_TIMEOUT) -> Any:
    """At-most-once execution with a timeout. Used for writes and outbound calls."""
    return await with_timeout(awaitable, timeout)


async def execute_with_retry(
    operation: Callable[[], Awaitable[Any]],
    retries: int = DB_RETRY_ATTEMPTS,
    delay: float = DB_RETRY_DELAY,
    timeout: float = DB_QUERY_TIMEOUT,
    on_retry: Optional[Callable[[], Awaitable[Any]]] = None,
) -> Any:
    """
    Run `operation` up to `retries + 1` times with exponential backoff.

    Every attempt is raced against `timeout`. Only read-only operations
    should go through here: there is no idempotency key.
    """
    attempt = 0
    while True:
        try:
            return await with_timeout(operation(), timeout)
        except Exception as e:
            if attempt >= retries:
                logger.error("Operation failed after %d attempt(s): %s", attempt + 1, e)
                raise
            attempt += 1
            logger.warning(
                "Operation failed (attempt %d/%d), retrying in %.2fs: %s",
                attempt, retries + 1, delay, e,
            )
            if on_retry is not None:
                await on_retry()
            await asyncio.sleep(delay)
            delay *= 2
