"""Asyncio combinators for fan-out work.

`settle_all` captures every outcome instead of failing fast, and
`gather_bounded` caps how many coroutines run at once.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
K = TypeVar("K")


@dataclass(frozen=True)
class Outcome(Generic[K, T]):
    """Result of one settled awaitable, tagged with the input it came from."""

    key: K
    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def settle_all(tasks: Iterable[tuple[K, Awaitable[T]]]) -> list[Outcome[K, T]]:
    """Await every task and capture each success or failure.

    Never short-circuits on the first failure. Cancellation of the caller
    still propagates.

    Args:
        tasks: (key, awaitable) pairs; the key identifies the input

    Returns:
        One Outcome per task, in input order
    """
    pairs = list(tasks)
    results = await asyncio.gather(*(aw for _, aw in pairs), return_exceptions=True)

    outcomes: list[Outcome[K, T]] = []
    for (key, _), result in zip(pairs, results, strict=True):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            outcomes.append(Outcome(key=key, error=result))
        else:
            outcomes.append(Outcome(key=key, value=result))
    return outcomes


async def gather_bounded(
    items: Iterable[K],
    func: Callable[[K], Awaitable[T]],
    limit: int,
) -> list[T]:
    """Run `func` over `items` with at most `limit` calls in flight.

    Results come back in input order. The first failure propagates.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)

    async def run(item: K) -> T:
        async with semaphore:
            return await func(item)

    return await asyncio.gather(*(run(item) for item in items))
