"""SQLite-backed cache store for local persistence.

Items are stored as JSON documents keyed by (partition key, sort key).
Calls run on a worker thread via asyncio.to_thread so the event loop is
never blocked on disk I/O.
"""

from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from rich.console import Console

from sentiment_api.domain.constants import TTL_ATTRIBUTE
from sentiment_api.storage.base import CacheStore, Item, TableSchema, is_expired
from sentiment_api.storage.operations import (
    BatchReadOperation,
    BatchWriteOperation,
    DeleteOperation,
    GetOperation,
    OperationKind,
    PutOperation,
    QueryOperation,
    StoreOperation,
    UpdateOperation,
)

console = Console()

IN_MEMORY = ":memory:"


class SqliteCacheStore(CacheStore):
    """SQLite implementation of the cache store contract.

    One database file may hold several tables; each store instance owns
    one of them.
    """

    def __init__(self, schema: TableSchema, db_path: Path | str = IN_MEMORY, **kwargs: Any):
        """Initialize the store.

        Args:
            schema: Table served by this store
            db_path: Database file, or ":memory:" for a private in-memory db
            **kwargs: Retry and batch-size overrides for CacheStore
        """
        super().__init__(schema, **kwargs)
        self.db_path = db_path if str(db_path) == IN_MEMORY else Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()
        self._handlers: dict[OperationKind, Callable[[Any], Any]] = {
            OperationKind.GET: self._handle_get,
            OperationKind.PUT: self._handle_put,
            OperationKind.UPDATE: self._handle_update,
            OperationKind.DELETE: self._handle_delete,
            OperationKind.QUERY: self._handle_query,
            OperationKind.BATCH_WRITE: self._handle_batch_write,
            OperationKind.BATCH_READ: self._handle_batch_read,
        }

    @property
    def _table(self) -> str:
        # Table names come from configuration, never from request data
        return '"' + self.schema.name.replace('"', '""') + '"'

    def _ensure_connected(self) -> sqlite3.Connection:
        """Ensure database connection and schema exist."""
        if self._conn is not None:
            return self._conn

        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {self._table} (
                pk TEXT NOT NULL,
                sk TEXT NOT NULL DEFAULT '',
                item TEXT NOT NULL,
                expires_at INTEGER,
                PRIMARY KEY (pk, sk)
            )
        """)
        self._conn.commit()
        return self._conn

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def execute(self, operation: StoreOperation) -> Any:
        """Run one operation synchronously under the connection lock."""
        handler = self._handlers[operation.kind]
        with self._lock:
            conn = self._ensure_connected()
            result = handler(operation)
            conn.commit()
            return result

    async def _run(self, operation: StoreOperation) -> Any:
        return await asyncio.to_thread(self.execute, operation)

    def _key_columns(self, key: Item) -> tuple[str, str]:
        pk = str(key[self.schema.partition_key])
        sk = "" if self.schema.sort_key is None else str(key[self.schema.sort_key])
        return pk, sk

    def _select_item(self, pk: str, sk: str) -> Item | None:
        row = self._conn.execute(
            f"SELECT item FROM {self._table} WHERE pk = ? AND sk = ?", (pk, sk)
        ).fetchone()
        return None if row is None else json.loads(row[0])

    def _upsert(self, item: Item) -> None:
        pk, sk = self._key_columns(item)
        self._conn.execute(
            f"""
            INSERT OR REPLACE INTO {self._table} (pk, sk, item, expires_at)
            VALUES (?, ?, ?, ?)
            """,
            (pk, sk, json.dumps(item), item.get(TTL_ATTRIBUTE)),
        )

    def _handle_get(self, op: GetOperation) -> Item | None:
        return self._select_item(*self._key_columns(op.key))

    def _handle_put(self, op: PutOperation) -> bool:
        if op.if_not_exists:
            pk, sk = self._key_columns(op.item)
            row = self._conn.execute(
                f"SELECT expires_at FROM {self._table} WHERE pk = ? AND sk = ?", (pk, sk)
            ).fetchone()
            if row is not None and not is_expired({TTL_ATTRIBUTE: row[0]}):
                return False
        self._upsert(op.item)
        return True

    def _handle_update(self, op: UpdateOperation) -> Item | None:
        item = self._select_item(*self._key_columns(op.key))
        if item is None:
            return None
        item.update(op.changes)
        self._upsert(item)
        return item

    def _handle_delete(self, op: DeleteOperation) -> None:
        pk, sk = self._key_columns(op.key)
        self._conn.execute(f"DELETE FROM {self._table} WHERE pk = ? AND sk = ?", (pk, sk))

    def _handle_query(self, op: QueryOperation) -> list[Item]:
        cursor = self._conn.execute(
            f"SELECT item FROM {self._table} WHERE pk = ? ORDER BY sk",
            (str(op.partition_value),),
        )
        return [json.loads(row[0]) for row in cursor]

    def _handle_batch_write(self, op: BatchWriteOperation) -> list[Item]:
        for item in op.items:
            self._upsert(item)
        return []

    def _handle_batch_read(self, op: BatchReadOperation) -> tuple[list[Item], list[Item]]:
        found = []
        for key in op.keys:
            item = self._select_item(*self._key_columns(key))
            if item is not None:
                found.append(item)
        return found, []

    # ------------------------------------------------------------------
    # CacheStore primitives
    # ------------------------------------------------------------------

    async def _get(self, key: Item) -> Item | None:
        return await self._run(GetOperation(key=key))

    async def _put(self, item: Item, if_not_exists: bool) -> bool:
        return await self._run(PutOperation(item=item, if_not_exists=if_not_exists))

    async def _update(self, key: Item, changes: Item) -> Item | None:
        return await self._run(UpdateOperation(key=key, changes=changes))

    async def _delete(self, key: Item) -> None:
        await self._run(DeleteOperation(key=key))

    async def _query(self, partition_value: Any) -> list[Item]:
        return await self._run(QueryOperation(partition_value=partition_value))

    async def _write_chunk(self, items: list[Item]) -> list[Item]:
        return await self._run(BatchWriteOperation(items=items))

    async def _read_chunk(self, keys: list[Item]) -> tuple[list[Item], list[Item]]:
        return await self._run(BatchReadOperation(keys=keys))

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def purge_expired(self, now: int | None = None) -> int:
        """Physically delete expired rows. Returns the number removed."""
        reference = int(time.time()) if now is None else now
        with self._lock:
            conn = self._ensure_connected()
            cursor = conn.execute(
                f"DELETE FROM {self._table} WHERE expires_at IS NOT NULL AND expires_at <= ?",
                (reference,),
            )
            conn.commit()
            return cursor.rowcount

    @property
    def item_count(self) -> int:
        """Count of stored rows, expired ones included."""
        with self._lock:
            conn = self._ensure_connected()
            return conn.execute(f"SELECT COUNT(*) FROM {self._table}").fetchone()[0]

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def log_status(self) -> None:
        """Log store status to console."""
        console.print(f"[bold blue]🗄️ Opening cache table {self.schema.name}...[/]")
        console.print(f"  Cache location: [cyan]{self.db_path}[/]")
        console.print(f"  Cached items: [green]{self.item_count:,}[/]")
        console.print()
