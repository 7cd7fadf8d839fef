"""In-memory cache store.

Keeps one dict per table keyed by composite cache key. Expired entries are
evicted lazily when touched. Used as the default backend and in tests.
"""

from __future__ import annotations

from typing import Any

from sentiment_api.storage.base import CacheStore, Item, TableSchema, is_expired


class InMemoryCacheStore(CacheStore):
    """Dict-backed implementation of the full store contract."""

    def __init__(self, schema: TableSchema, **kwargs: Any):
        super().__init__(schema, **kwargs)
        self._items: dict[str, Item] = {}

    def __len__(self) -> int:
        return len(self._items)

    def _live(self, composite: str) -> Item | None:
        item = self._items.get(composite)
        if item is not None and is_expired(item):
            del self._items[composite]
            return None
        return item

    async def _get(self, key: Item) -> Item | None:
        item = self._live(self.schema.composite_key(key))
        return None if item is None else dict(item)

    async def _put(self, item: Item, if_not_exists: bool) -> bool:
        composite = self.schema.composite_key(item)
        if if_not_exists and self._live(composite) is not None:
            return False
        self._items[composite] = dict(item)
        return True

    async def _update(self, key: Item, changes: Item) -> Item | None:
        composite = self.schema.composite_key(key)
        item = self._live(composite)
        if item is None:
            return None
        item.update(changes)
        return dict(item)

    async def _delete(self, key: Item) -> None:
        self._items.pop(self.schema.composite_key(key), None)

    async def _query(self, partition_value: Any) -> list[Item]:
        matches = []
        for composite in list(self._items):
            item = self._live(composite)
            if item is not None and item[self.schema.partition_key] == partition_value:
                matches.append(dict(item))
        if self.schema.sort_key is not None:
            matches.sort(key=lambda item: str(item[self.schema.sort_key]))
        return matches

    async def _write_chunk(self, items: list[Item]) -> list[Item]:
        for item in items:
            self._items[self.schema.composite_key(item)] = dict(item)
        return []

    async def _read_chunk(self, keys: list[Item]) -> tuple[list[Item], list[Item]]:
        found = []
        for key in keys:
            item = self._live(self.schema.composite_key(key))
            if item is not None:
                found.append(dict(item))
        return found, []

    def clear(self) -> None:
        """Drop every item."""
        self._items.clear()
