"""Typed store operations for the SQLite backend.

Each call into the SQLite store is expressed as one of these tagged
dataclasses and dispatched on its `kind`, so the backend never has to
inspect SQL text to decide what a request means.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


class OperationKind(str, Enum):
    """Kinds of store operations."""

    GET = "get"
    PUT = "put"
    UPDATE = "update"
    DELETE = "delete"
    QUERY = "query"
    BATCH_WRITE = "batch_write"
    BATCH_READ = "batch_read"


@dataclass(frozen=True)
class GetOperation:
    kind: ClassVar[OperationKind] = OperationKind.GET
    key: dict[str, Any]


@dataclass(frozen=True)
class PutOperation:
    kind: ClassVar[OperationKind] = OperationKind.PUT
    item: dict[str, Any]
    if_not_exists: bool = False


@dataclass(frozen=True)
class UpdateOperation:
    kind: ClassVar[OperationKind] = OperationKind.UPDATE
    key: dict[str, Any]
    changes: dict[str, Any]


@dataclass(frozen=True)
class DeleteOperation:
    kind: ClassVar[OperationKind] = OperationKind.DELETE
    key: dict[str, Any]


@dataclass(frozen=True)
class QueryOperation:
    kind: ClassVar[OperationKind] = OperationKind.QUERY
    partition_value: Any


@dataclass(frozen=True)
class BatchWriteOperation:
    kind: ClassVar[OperationKind] = OperationKind.BATCH_WRITE
    items: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class BatchReadOperation:
    kind: ClassVar[OperationKind] = OperationKind.BATCH_READ
    keys: list[dict[str, Any]] = field(default_factory=list)


StoreOperation = (
    GetOperation
    | PutOperation
    | UpdateOperation
    | DeleteOperation
    | QueryOperation
    | BatchWriteOperation
    | BatchReadOperation
)
