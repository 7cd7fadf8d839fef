"""Typed repositories over the four cache tables.

Repositories upper-case tickers, stamp TTLs and convert between store
items and domain entities. They hold no state beyond their store.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sentiment_api.core.utils.cache_keys import now_ms
from sentiment_api.domain.constants import (
    ARTICLE_TTL_DAYS,
    JOB_TTL_DAYS,
    SENTIMENT_TTL_DAYS,
    STOCK_TTL_DAYS,
)
from sentiment_api.domain.entities import (
    Article,
    JobStatus,
    PriceBar,
    SentimentJob,
    SentimentRecord,
)
from sentiment_api.domain.services import filter_articles_by_date_range
from sentiment_api.storage.base import CacheStore, TableSchema

logger = logging.getLogger(__name__)


def news_schema(name: str) -> TableSchema:
    return TableSchema(name=name, partition_key="ticker", sort_key="article_hash")


def sentiment_schema(name: str) -> TableSchema:
    return TableSchema(name=name, partition_key="ticker", sort_key="article_hash")


def jobs_schema(name: str) -> TableSchema:
    return TableSchema(name=name, partition_key="job_id")


def stocks_schema(name: str) -> TableSchema:
    return TableSchema(name=name, partition_key="ticker", sort_key="date")


# ============================================================================
# News articles
# ============================================================================


class NewsCacheRepository:
    """Cached news articles, keyed by (ticker, article_hash)."""

    def __init__(self, store: CacheStore):
        self.store = store

    async def put_article(self, article: Article) -> bool:
        """Cache one article unless it is already present.

        Returns:
            True if written, False if it was already cached
        """
        return await self.store.put(article.to_item(), ttl_days=ARTICLE_TTL_DAYS, if_not_exists=True)

    async def batch_put_articles(self, articles: Iterable[Article]) -> None:
        """Cache many articles (overwrites existing entries)."""
        await self.store.batch_put((a.to_item() for a in articles), ttl_days=ARTICLE_TTL_DAYS)

    async def get_article(self, ticker: str, article_hash: str) -> Article | None:
        item = await self.store.get({"ticker": ticker.upper(), "article_hash": article_hash})
        return None if item is None else Article.from_item(item)

    async def exists(self, ticker: str, article_hash: str) -> bool:
        return await self.store.exists({"ticker": ticker.upper(), "article_hash": article_hash})

    async def query_by_ticker(self, ticker: str) -> list[Article]:
        """All cached articles for a ticker."""
        items = await self.store.query(ticker.upper())
        return [Article.from_item(item) for item in items]

    async def query_by_date_range(
        self, ticker: str, start_date: str, end_date: str
    ) -> list[Article]:
        """Cached articles for a ticker dated within [start_date, end_date]."""
        return filter_articles_by_date_range(
            await self.query_by_ticker(ticker), start_date, end_date
        )


# ============================================================================
# Article sentiment
# ============================================================================


class SentimentCacheRepository:
    """Article-level sentiment records, keyed by (ticker, article_hash)."""

    def __init__(self, store: CacheStore):
        self.store = store

    async def put_sentiment(self, record: SentimentRecord) -> bool:
        """Store a record unless one already exists for the article.

        Returns:
            True if written, False if a record was already cached
        """
        written = await self.store.put(
            record.to_item(), ttl_days=SENTIMENT_TTL_DAYS, if_not_exists=True
        )
        if not written:
            logger.info(
                f"Sentiment already cached for {record.ticker.upper()}/{record.article_hash}"
            )
        return written

    async def batch_put_sentiments(self, records: Iterable[SentimentRecord]) -> None:
        """Store many records. Existing records for the same key are overwritten."""
        await self.store.batch_put((r.to_item() for r in records), ttl_days=SENTIMENT_TTL_DAYS)

    async def get_sentiment(self, ticker: str, article_hash: str) -> SentimentRecord | None:
        item = await self.store.get({"ticker": ticker.upper(), "article_hash": article_hash})
        return None if item is None else SentimentRecord.from_item(item)

    async def exists(self, ticker: str, article_hash: str) -> bool:
        return await self.store.exists({"ticker": ticker.upper(), "article_hash": article_hash})

    async def batch_get_sentiments(
        self, ticker: str, article_hashes: Iterable[str]
    ) -> list[SentimentRecord]:
        """Fetch records for many hashes. Hashes without a record are omitted."""
        keys = [{"ticker": ticker.upper(), "article_hash": h} for h in article_hashes]
        items = await self.store.batch_get(keys)
        return [SentimentRecord.from_item(item) for item in items]

    async def query_by_ticker(self, ticker: str) -> list[SentimentRecord]:
        """All cached sentiment records for a ticker."""
        items = await self.store.query(ticker.upper())
        return [SentimentRecord.from_item(item) for item in items]


# ============================================================================
# Jobs
# ============================================================================


class SentimentJobsRepository:
    """Job tracking records, keyed by job_id."""

    def __init__(self, store: CacheStore):
        self.store = store

    async def create_job(self, job: SentimentJob) -> bool:
        """Insert a new job record.

        Returns:
            False if a job with the same id already exists
        """
        return await self.store.put(job.to_item(), ttl_days=JOB_TTL_DAYS, if_not_exists=True)

    async def get_job(self, job_id: str) -> SentimentJob | None:
        item = await self.store.get({"job_id": job_id})
        return None if item is None else SentimentJob.from_item(item)

    async def _transition(self, job_id: str, changes: dict) -> SentimentJob | None:
        item = await self.store.update({"job_id": job_id}, changes)
        if item is None:
            logger.warning(f"Job {job_id} not found for update {changes.get('status')}")
            return None
        return SentimentJob.from_item(item)

    async def mark_in_progress(self, job_id: str) -> SentimentJob | None:
        return await self._transition(job_id, {"status": JobStatus.IN_PROGRESS.value})

    async def mark_completed(
        self,
        job_id: str,
        articles_processed: int,
        articles_skipped: int | None = None,
    ) -> SentimentJob | None:
        changes: dict = {
            "status": JobStatus.COMPLETED.value,
            "completed_at": now_ms(),
            "articles_processed": articles_processed,
        }
        if articles_skipped is not None:
            changes["articles_skipped"] = articles_skipped
        return await self._transition(job_id, changes)

    async def mark_failed(self, job_id: str, error: str) -> SentimentJob | None:
        return await self._transition(
            job_id,
            {"status": JobStatus.FAILED.value, "completed_at": now_ms(), "error": error},
        )

    async def delete_job(self, job_id: str) -> None:
        await self.store.delete({"job_id": job_id})


# ============================================================================
# Daily prices
# ============================================================================


class StocksCacheRepository:
    """Daily OHLCV bars, keyed by (ticker, date)."""

    def __init__(self, store: CacheStore):
        self.store = store

    async def put_price_bars(self, bars: Iterable[PriceBar]) -> None:
        await self.store.batch_put((bar.to_item() for bar in bars), ttl_days=STOCK_TTL_DAYS)

    async def get_price_bar(self, ticker: str, date: str) -> PriceBar | None:
        item = await self.store.get({"ticker": ticker.upper(), "date": date})
        return None if item is None else PriceBar.from_item(item)

    async def query_by_date_range(
        self, ticker: str, start_date: str | None = None, end_date: str | None = None
    ) -> list[PriceBar]:
        """Cached bars for a ticker within [start_date, end_date], oldest first."""
        bars = [PriceBar.from_item(item) for item in await self.store.query(ticker.upper())]
        bars = [
            bar
            for bar in bars
            if (start_date is None or bar.date >= start_date)
            and (end_date is None or bar.date <= end_date)
        ]
        return sorted(bars, key=lambda bar: bar.date)
