"""Exponential backoff for transient cache store failures."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from botocore.exceptions import ClientError

from sentiment_api.domain.constants import (
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_RETRIES,
    RETRYABLE_ERROR_CODES,
)
from sentiment_api.domain.exceptions import StoreError, TransientStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


def error_code(exc: BaseException) -> str:
    """Extract a provider error code from an exception.

    Store errors carry their code, botocore errors carry it in the response
    payload, anything else falls back to the exception class name.
    """
    if isinstance(exc, StoreError) and exc.code:
        return exc.code
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return type(exc).__name__


def is_retryable(exc: BaseException) -> bool:
    """Return True for capacity, throttling and internal-transient failures."""
    if isinstance(exc, TransientStoreError):
        return True
    return error_code(exc) in RETRYABLE_ERROR_CODES


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run an async store operation, backing off on transient errors.

    The operation is attempted up to max_retries + 1 times. Before retry n
    (0-based) the caller waits base_delay_ms * 2**n. Non-transient errors are
    re-raised immediately; once retries are exhausted the last error
    propagates unchanged.

    Args:
        operation: Zero-argument coroutine factory
        max_retries: Number of retries after the first attempt
        base_delay_ms: Base delay in milliseconds
        sleep: Awaitable sleep, injectable for tests

    Returns:
        Result of the operation
    """
    for attempt in range(max_retries + 1):
        try:
            return await operation()
        except Exception as exc:
            if not is_retryable(exc) or attempt == max_retries:
                raise
            delay_ms = base_delay_ms * (2**attempt)
            logger.warning(
                f"Store retry {attempt + 1}/{max_retries} after {delay_ms}ms "
                f"due to {error_code(exc)}"
            )
            await sleep(delay_ms / 1000)

    # Unreachable: the final attempt either returns or raises
    raise RuntimeError("with_retry exhausted without result")
