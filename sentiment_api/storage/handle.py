"""Store handle bundling the four repositories, plus its factories."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sentiment_api.core.config import StoreConfig
from sentiment_api.storage.base import CacheStore, TableSchema
from sentiment_api.storage.repositories import (
    NewsCacheRepository,
    SentimentCacheRepository,
    SentimentJobsRepository,
    StocksCacheRepository,
    jobs_schema,
    news_schema,
    sentiment_schema,
    stocks_schema,
)

logger = logging.getLogger(__name__)


@dataclass
class StoreHandle:
    """Access point for every cache table the service uses."""

    news: NewsCacheRepository
    sentiment: SentimentCacheRepository
    jobs: SentimentJobsRepository
    stocks: StocksCacheRepository

    @property
    def stores(self) -> list[CacheStore]:
        return [self.news.store, self.sentiment.store, self.jobs.store, self.stocks.store]

    def close(self) -> None:
        for store in self.stores:
            store.close()


def build_store_handle(
    config: StoreConfig,
    make_store: Callable[[TableSchema], CacheStore],
) -> StoreHandle:
    """Build a handle with one store per configured table."""
    return StoreHandle(
        news=NewsCacheRepository(make_store(news_schema(config.news_table))),
        sentiment=SentimentCacheRepository(make_store(sentiment_schema(config.sentiment_table))),
        jobs=SentimentJobsRepository(make_store(jobs_schema(config.jobs_table))),
        stocks=StocksCacheRepository(make_store(stocks_schema(config.stocks_table))),
    )


def create_store_handle(config: StoreConfig | None = None) -> StoreHandle:
    """Create a store handle for the configured backend.

    Args:
        config: Store configuration (defaults to environment)

    Returns:
        StoreHandle over memory, sqlite or dynamodb stores
    """
    config = config or StoreConfig.from_env()
    retry = {"max_retries": config.max_retries, "base_delay_ms": config.base_delay_ms}
    logger.info(f"Creating {config.backend} cache store handle")

    if config.backend == "sqlite":
        from sentiment_api.storage.sqlite import SqliteCacheStore

        def make_sqlite(schema: TableSchema) -> CacheStore:
            store = SqliteCacheStore(schema, db_path=config.sqlite_path, **retry)
            store.log_status()
            return store

        return build_store_handle(config, make_sqlite)

    if config.backend == "dynamodb":
        from sentiment_api.storage.dynamodb import DynamoDBCacheStore

        return build_store_handle(
            config,
            lambda schema: DynamoDBCacheStore(schema, region_name=config.aws_region, **retry),
        )

    from sentiment_api.storage.memory import InMemoryCacheStore

    return build_store_handle(config, lambda schema: InMemoryCacheStore(schema, **retry))


def create_memory_store_handle(**kwargs) -> StoreHandle:
    """In-memory handle with default table names, for tests and local runs."""
    from sentiment_api.storage.memory import InMemoryCacheStore

    return build_store_handle(StoreConfig(), lambda schema: InMemoryCacheStore(schema, **kwargs))
