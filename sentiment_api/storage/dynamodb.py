"""DynamoDB-backed cache store.

Wraps a boto3 Table resource. Calls are blocking, so each one runs on a
worker thread. Provider errors are translated into TransientStoreError or
PermanentStoreError by error code.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from decimal import Decimal
from typing import Any

import boto3
from boto3.dynamodb.conditions import Key as KeyCondition
from botocore.exceptions import ClientError

from sentiment_api.domain.constants import RETRYABLE_ERROR_CODES
from sentiment_api.domain.exceptions import (
    InvalidArgumentError,
    PermanentStoreError,
    StoreError,
    TransientStoreError,
)
from sentiment_api.storage.base import CacheStore, Item, TableSchema

logger = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def build_update_expression(updates: dict[str, Any]) -> dict[str, Any]:
    """Build UpdateExpression parameters for a set of attribute changes.

    Example:
        build_update_expression({"status": "COMPLETED"}) returns
        UpdateExpression "SET #status = :status" with matching names/values.
    """
    if not updates:
        raise InvalidArgumentError("Updates object cannot be empty", field="updates")

    names = {f"#{name}": name for name in updates}
    values = {f":{name}": value for name, value in updates.items()}
    assignments = ", ".join(f"#{name} = :{name}" for name in updates)
    return {
        "UpdateExpression": f"SET {assignments}",
        "ExpressionAttributeNames": names,
        "ExpressionAttributeValues": values,
    }


def to_dynamo(value: Any) -> Any:
    """Convert floats (recursively) to Decimal, as the boto3 serializer requires."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamo(v) for v in value]
    return value


def from_dynamo(value: Any) -> Any:
    """Convert Decimals back to int or float."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    return value


def translate_client_error(error: ClientError) -> StoreError:
    """Map a botocore ClientError to the store error hierarchy."""
    code = error.response.get("Error", {}).get("Code", "")
    message = error.response.get("Error", {}).get("Message", str(error))
    if code in RETRYABLE_ERROR_CODES:
        return TransientStoreError(message, code=code)
    return PermanentStoreError(message, code=code)


class DynamoDBCacheStore(CacheStore):
    """DynamoDB implementation of the cache store contract."""

    def __init__(
        self,
        schema: TableSchema,
        table: Any | None = None,
        region_name: str | None = None,
        **kwargs: Any,
    ):
        """Initialize the store.

        Args:
            schema: Table served by this store
            table: Pre-built boto3 Table (tests pass a mock); built from
                schema.name when omitted
            region_name: AWS region for the default resource
            **kwargs: Retry and batch-size overrides for CacheStore
        """
        super().__init__(schema, **kwargs)
        if table is None:
            table = boto3.resource("dynamodb", region_name=region_name).Table(schema.name)
        self._table = table

    @property
    def _client(self) -> Any:
        return self._table.meta.client

    async def _invoke(self, fn: Callable[..., Any], **kwargs: Any) -> Any:
        def call() -> Any:
            try:
                return fn(**kwargs)
            except ClientError as e:
                code = e.response.get("Error", {}).get("Code", "")
                if code == CONDITIONAL_CHECK_FAILED:
                    raise
                raise translate_client_error(e) from e

        return await asyncio.to_thread(call)

    async def _get(self, key: Item) -> Item | None:
        response = await self._invoke(self._table.get_item, Key=to_dynamo(key))
        item = response.get("Item")
        return None if item is None else from_dynamo(item)

    async def _put(self, item: Item, if_not_exists: bool) -> bool:
        params: dict[str, Any] = {"Item": to_dynamo(item)}
        if if_not_exists:
            params["ConditionExpression"] = "attribute_not_exists(#pk)"
            params["ExpressionAttributeNames"] = {"#pk": self.schema.partition_key}
        try:
            await self._invoke(self._table.put_item, **params)
        except ClientError:
            logger.info(f"[{self.schema.name}] Item already exists, skipping conditional put")
            return False
        return True

    async def _update(self, key: Item, changes: Item) -> Item | None:
        params = build_update_expression(to_dynamo(changes))
        params["ExpressionAttributeNames"]["#pk"] = self.schema.partition_key
        try:
            response = await self._invoke(
                self._table.update_item,
                Key=to_dynamo(key),
                ConditionExpression="attribute_exists(#pk)",
                ReturnValues="ALL_NEW",
                **params,
            )
        except ClientError:
            return None
        return from_dynamo(response.get("Attributes", {}))

    async def _delete(self, key: Item) -> None:
        await self._invoke(self._table.delete_item, Key=to_dynamo(key))

    async def _query(self, partition_value: Any) -> list[Item]:
        items: list[Item] = []
        params: dict[str, Any] = {
            "KeyConditionExpression": KeyCondition(self.schema.partition_key).eq(partition_value)
        }
        while True:
            response = await self._invoke(self._table.query, **params)
            items.extend(from_dynamo(item) for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            params["ExclusiveStartKey"] = last_key

    async def _write_chunk(self, items: list[Item]) -> list[Item]:
        response = await self._invoke(
            self._client.batch_write_item,
            RequestItems={
                self.schema.name: [{"PutRequest": {"Item": to_dynamo(item)}} for item in items]
            },
        )
        unprocessed = response.get("UnprocessedItems", {}).get(self.schema.name, [])
        return [
            from_dynamo(request["PutRequest"]["Item"])
            for request in unprocessed
            if "PutRequest" in request
        ]

    async def _read_chunk(self, keys: list[Item]) -> tuple[list[Item], list[Item]]:
        response = await self._invoke(
            self._client.batch_get_item,
            RequestItems={self.schema.name: {"Keys": [to_dynamo(key) for key in keys]}},
        )
        found = [from_dynamo(item) for item in response.get("Responses", {}).get(self.schema.name, [])]
        unprocessed = response.get("UnprocessedKeys", {}).get(self.schema.name, {}).get("Keys", [])
        return found, [from_dynamo(key) for key in unprocessed]
