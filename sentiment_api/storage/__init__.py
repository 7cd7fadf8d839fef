"""Cache store backends and repositories."""

from sentiment_api.storage.base import CacheStore, TableSchema, is_expired
from sentiment_api.storage.handle import (
    StoreHandle,
    build_store_handle,
    create_memory_store_handle,
    create_store_handle,
)
from sentiment_api.storage.memory import InMemoryCacheStore
from sentiment_api.storage.repositories import (
    NewsCacheRepository,
    SentimentCacheRepository,
    SentimentJobsRepository,
    StocksCacheRepository,
)
from sentiment_api.storage.retry import is_retryable, with_retry

__all__ = [
    "CacheStore",
    "InMemoryCacheStore",
    "NewsCacheRepository",
    "SentimentCacheRepository",
    "SentimentJobsRepository",
    "StocksCacheRepository",
    "StoreHandle",
    "TableSchema",
    "build_store_handle",
    "create_memory_store_handle",
    "create_store_handle",
    "is_expired",
    "is_retryable",
    "with_retry",
]
