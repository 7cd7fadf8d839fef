"""Sentiment-related domain entities.

Each persisted entity converts to and from a flat item dict, which is the
unit the cache store reads and writes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Classification(str, Enum):
    """Sentiment class for an article or a day."""

    POS = "POS"
    NEG = "NEG"
    NEUT = "NEUT"


class JobStatus(str, Enum):
    """Lifecycle states of a sentiment job."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


@dataclass(frozen=True)
class Article:
    """A cached news article for a ticker.

    Immutable once cached. Identity is (ticker, article_hash).
    """

    ticker: str
    article_hash: str
    date: str  # YYYY-MM-DD
    title: str
    description: str = ""
    url: str = ""
    publisher: str | None = None
    fetched_at: int | None = None  # epoch ms
    expires_at: int | None = None  # epoch seconds

    @property
    def text(self) -> str:
        """Text fed to the analyzer (title + description)."""
        return f"{self.title or ''} {self.description or ''}".strip()

    def to_item(self) -> dict[str, Any]:
        """Convert to a store item."""
        item: dict[str, Any] = {
            "ticker": self.ticker.upper(),
            "article_hash": self.article_hash,
            "date": self.date,
            "title": self.title,
            "description": self.description,
            "url": self.url,
        }
        if self.publisher is not None:
            item["publisher"] = self.publisher
        if self.fetched_at is not None:
            item["fetched_at"] = self.fetched_at
        if self.expires_at is not None:
            item["expires_at"] = self.expires_at
        return item

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> Article:
        """Create from a store item."""
        return cls(
            ticker=item["ticker"],
            article_hash=item["article_hash"],
            date=item["date"],
            title=item.get("title", ""),
            description=item.get("description", ""),
            url=item.get("url", ""),
            publisher=item.get("publisher"),
            fetched_at=_opt_int(item.get("fetched_at")),
            expires_at=_opt_int(item.get("expires_at")),
        )


@dataclass(frozen=True)
class SentimentRecord:
    """Article-level sentiment, created once per (ticker, article_hash)."""

    ticker: str
    article_hash: str
    positive_count: int
    negative_count: int
    score: float  # [-1, 1]
    classification: Classification
    analyzed_at: int  # epoch ms
    expires_at: int | None = None  # epoch seconds

    def to_item(self) -> dict[str, Any]:
        """Convert to a store item."""
        item: dict[str, Any] = {
            "ticker": self.ticker.upper(),
            "article_hash": self.article_hash,
            "positive_count": self.positive_count,
            "negative_count": self.negative_count,
            "score": self.score,
            "classification": self.classification.value,
            "analyzed_at": self.analyzed_at,
        }
        if self.expires_at is not None:
            item["expires_at"] = self.expires_at
        return item

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> SentimentRecord:
        """Create from a store item."""
        return cls(
            ticker=item["ticker"],
            article_hash=item["article_hash"],
            positive_count=int(item["positive_count"]),
            negative_count=int(item["negative_count"]),
            score=float(item["score"]),
            classification=Classification(item["classification"]),
            analyzed_at=int(item["analyzed_at"]),
            expires_at=_opt_int(item.get("expires_at")),
        )


@dataclass(frozen=True)
class DailySentiment:
    """Aggregated sentiment for one calendar date. Derived, never persisted."""

    date: str
    positive_total: int
    negative_total: int
    score: float
    classification: Classification
    article_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "date": self.date,
            "positive_total": self.positive_total,
            "negative_total": self.negative_total,
            "score": self.score,
            "classification": self.classification.value,
            "article_count": self.article_count,
        }


@dataclass
class SentimentJob:
    """Tracking record for one (ticker, start_date, end_date) analysis."""

    job_id: str
    status: JobStatus
    ticker: str
    start_date: str
    end_date: str
    started_at: int  # epoch ms
    completed_at: int | None = None
    articles_processed: int | None = None
    articles_skipped: int | None = None
    error: str | None = None
    expires_at: int | None = None  # epoch seconds

    @property
    def duration_ms(self) -> int | None:
        """Wall time between start and completion, if finished."""
        if self.completed_at is None:
            return None
        return self.completed_at - self.started_at

    def to_item(self) -> dict[str, Any]:
        """Convert to a store item (optional fields omitted when unset)."""
        item: dict[str, Any] = {
            "job_id": self.job_id,
            "status": self.status.value,
            "ticker": self.ticker,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "started_at": self.started_at,
        }
        optional = {
            "completed_at": self.completed_at,
            "articles_processed": self.articles_processed,
            "articles_skipped": self.articles_skipped,
            "error": self.error,
            "expires_at": self.expires_at,
        }
        item.update({k: v for k, v in optional.items() if v is not None})
        return item

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> SentimentJob:
        """Create from a store item."""
        return cls(
            job_id=item["job_id"],
            status=JobStatus(item["status"]),
            ticker=item["ticker"],
            start_date=item["start_date"],
            end_date=item["end_date"],
            started_at=int(item["started_at"]),
            completed_at=_opt_int(item.get("completed_at")),
            articles_processed=_opt_int(item.get("articles_processed")),
            articles_skipped=_opt_int(item.get("articles_skipped")),
            error=item.get("error"),
            expires_at=_opt_int(item.get("expires_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "ticker": self.ticker,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "articles_processed": self.articles_processed,
            "articles_skipped": self.articles_skipped,
            "duration_ms": self.duration_ms,
            "error": self.error,
        }


def _opt_int(value: Any) -> int | None:
    # Stores may hand numbers back as Decimal
    return None if value is None else int(value)
