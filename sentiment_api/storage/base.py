"""Abstract cache store shared by all backends.

A store instance serves exactly one table. Backends implement the raw
single-call primitives; this base class adds TTL stamping, expiry
filtering, provider batch-size chunking, recursive retry of unprocessed
sub-batches and exponential backoff on transient errors.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from sentiment_api.core.utils.cache_keys import calculate_ttl
from sentiment_api.domain.constants import (
    CACHE_KEY_DELIMITER,
    DEFAULT_BASE_DELAY_MS,
    DEFAULT_MAX_RETRIES,
    MAX_BATCH_READ_ITEMS,
    MAX_BATCH_WRITE_ITEMS,
    MAX_UNPROCESSED_RETRIES,
    TTL_ATTRIBUTE,
)
from sentiment_api.domain.exceptions import InvalidArgumentError, TransientStoreError
from sentiment_api.storage.retry import Sleep, with_retry

logger = logging.getLogger(__name__)

Item = dict[str, Any]
Key = Mapping[str, Any]

T = TypeVar("T")


@dataclass(frozen=True)
class TableSchema:
    """Name and key layout of one table."""

    name: str
    partition_key: str
    sort_key: str | None = None

    def key_of(self, item: Mapping[str, Any]) -> Item:
        """Extract the primary key attributes from an item or key mapping."""
        names = [self.partition_key] if self.sort_key is None else [self.partition_key, self.sort_key]
        missing = [name for name in names if item.get(name) in (None, "")]
        if missing:
            raise InvalidArgumentError(
                f"Missing key attribute(s) {missing} for table {self.name}",
                field=missing[0],
            )
        return {name: item[name] for name in names}

    def composite_key(self, item: Mapping[str, Any]) -> str:
        """Flatten a primary key into a single string, e.g. "AAPL#2025-01-15"."""
        key = self.key_of(item)
        return CACHE_KEY_DELIMITER.join(str(value) for value in key.values())


def is_expired(item: Mapping[str, Any], now: float | None = None) -> bool:
    """Return True if the item's TTL instant has passed."""
    expires_at = item.get(TTL_ATTRIBUTE)
    if expires_at is None:
        return False
    reference = time.time() if now is None else now
    return int(expires_at) <= reference


def chunked(values: Sequence[T], size: int) -> list[list[T]]:
    """Split a sequence into lists of at most `size` elements."""
    return [list(values[i : i + size]) for i in range(0, len(values), size)]


class CacheStore(ABC):
    """TTL-backed key/value store for one table.

    All public methods are coroutines. Every provider call is wrapped in
    `with_retry`, so each call is retried independently.
    """

    def __init__(
        self,
        schema: TableSchema,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
        sleep: Sleep = asyncio.sleep,
        max_batch_write: int = MAX_BATCH_WRITE_ITEMS,
        max_batch_read: int = MAX_BATCH_READ_ITEMS,
    ):
        self.schema = schema
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_batch_write = max_batch_write
        self.max_batch_read = max_batch_read
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Backend primitives
    # ------------------------------------------------------------------

    @abstractmethod
    async def _get(self, key: Item) -> Item | None:
        """Fetch one item by primary key."""

    @abstractmethod
    async def _put(self, item: Item, if_not_exists: bool) -> bool:
        """Write one item. Return False if the condition rejected the write."""

    @abstractmethod
    async def _update(self, key: Item, changes: Item) -> Item | None:
        """Merge attributes into an existing item. Return None if it is missing."""

    @abstractmethod
    async def _delete(self, key: Item) -> None:
        """Delete one item. Missing items are not an error."""

    @abstractmethod
    async def _query(self, partition_value: Any) -> list[Item]:
        """Return every item sharing a partition key value."""

    @abstractmethod
    async def _write_chunk(self, items: list[Item]) -> list[Item]:
        """Write at most max_batch_write items. Return the unprocessed ones."""

    @abstractmethod
    async def _read_chunk(self, keys: list[Item]) -> tuple[list[Item], list[Item]]:
        """Read at most max_batch_read keys. Return (found items, unprocessed keys)."""

    def close(self) -> None:
        """Release backend resources."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def _call(self, operation: Callable[[], Awaitable[T]]) -> T:
        return await with_retry(
            operation,
            max_retries=self.max_retries,
            base_delay_ms=self.base_delay_ms,
            sleep=self._sleep,
        )

    def _stamp_ttl(self, item: Mapping[str, Any], ttl_days: float | None) -> Item:
        stored = dict(item)
        if ttl_days is not None:
            stored[TTL_ATTRIBUTE] = calculate_ttl(ttl_days)
        return stored

    async def get(self, key: Key) -> Item | None:
        """Get an item by key. Expired items read as missing."""
        primary = self.schema.key_of(key)
        item = await self._call(lambda: self._get(primary))
        if item is None or is_expired(item):
            return None
        return item

    async def put(
        self,
        item: Mapping[str, Any],
        ttl_days: float | None = None,
        if_not_exists: bool = False,
    ) -> bool:
        """Write a single item.

        Args:
            item: Item including its key attributes
            ttl_days: Lifetime; stamps the TTL attribute when given
            if_not_exists: Keep an existing item instead of overwriting it

        Returns:
            True if written, False if the conditional write found the key
            already present (not an error)
        """
        stored = self._stamp_ttl(item, ttl_days)
        self.schema.key_of(stored)
        return await self._call(lambda: self._put(stored, if_not_exists))

    async def update(self, key: Key, changes: Mapping[str, Any]) -> Item | None:
        """Merge attributes into an existing item.

        Returns:
            The updated item, or None if no item exists under the key
        """
        if not changes:
            raise InvalidArgumentError("Updates cannot be empty", field="changes")
        primary = self.schema.key_of(key)
        overlap = set(primary) & set(changes)
        if overlap:
            raise InvalidArgumentError(
                f"Cannot update key attribute(s) {sorted(overlap)}", field=sorted(overlap)[0]
            )
        return await self._call(lambda: self._update(primary, dict(changes)))

    async def delete(self, key: Key) -> None:
        """Delete an item by key."""
        primary = self.schema.key_of(key)
        await self._call(lambda: self._delete(primary))

    async def query(self, partition_value: Any) -> list[Item]:
        """Return all live items with the given partition key value."""
        items = await self._call(lambda: self._query(partition_value))
        return [item for item in items if not is_expired(item)]

    async def exists(self, key: Key) -> bool:
        """Return True if a live item exists under the key."""
        return await self.get(key) is not None

    async def batch_get(self, keys: Iterable[Key]) -> list[Item]:
        """Fetch many items. Missing keys are omitted from the result."""
        unique: dict[str, Item] = {}
        for key in keys:
            primary = self.schema.key_of(key)
            unique.setdefault(self.schema.composite_key(primary), primary)

        found: list[Item] = []
        for chunk in chunked(list(unique.values()), self.max_batch_read):
            found.extend(await self._read_all(chunk, depth=0))
        return [item for item in found if not is_expired(item)]

    async def batch_put(
        self,
        items: Iterable[Mapping[str, Any]],
        ttl_days: float | None = None,
    ) -> None:
        """Write many items, unconditionally.

        Items are chunked to the provider write limit. Unlike `put` with
        `if_not_exists`, a batch write overwrites existing items.
        """
        unique: dict[str, Item] = {}
        for item in items:
            stored = self._stamp_ttl(item, ttl_days)
            unique[self.schema.composite_key(stored)] = stored

        for chunk in chunked(list(unique.values()), self.max_batch_write):
            await self._write_all(chunk, depth=0)

    async def _write_all(self, items: list[Item], depth: int) -> None:
        unprocessed = await self._call(lambda: self._write_chunk(items))
        if not unprocessed:
            return
        if depth >= MAX_UNPROCESSED_RETRIES:
            raise TransientStoreError(
                f"{len(unprocessed)} item(s) still unprocessed in {self.schema.name} "
                f"after {depth} retries",
                code="UnprocessedItems",
            )
        logger.warning(
            f"[{self.schema.name}] {len(unprocessed)} unprocessed item(s), retrying"
        )
        await self._write_all(unprocessed, depth + 1)

    async def _read_all(self, keys: list[Item], depth: int) -> list[Item]:
        found, unprocessed = await self._call(lambda: self._read_chunk(keys))
        if not unprocessed:
            return found
        if depth >= MAX_UNPROCESSED_RETRIES:
            raise TransientStoreError(
                f"{len(unprocessed)} key(s) still unprocessed in {self.schema.name} "
                f"after {depth} retries",
                code="UnprocessedKeys",
            )
        logger.warning(
            f"[{self.schema.name}] {len(unprocessed)} unprocessed key(s), retrying"
        )
        return found + await self._read_all(unprocessed, depth + 1)
