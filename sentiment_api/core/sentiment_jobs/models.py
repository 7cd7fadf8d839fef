"""Result models for sentiment jobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sentiment_api.domain.entities import DailySentiment, JobStatus, SentimentJob


@dataclass
class PipelineOutcome:
    """Counts and aggregates from one pipeline run."""

    articles_processed: int
    articles_skipped: int
    articles_failed: int
    daily_sentiment: list[DailySentiment] = field(default_factory=list)


@dataclass
class TriggerResult:
    """Outcome of triggering (or submitting) a job.

    `cached` is True when an existing job record was returned instead of
    running new work.
    """

    job: SentimentJob
    cached: bool
    daily_sentiment: list[DailySentiment] = field(default_factory=list)

    @property
    def job_id(self) -> str:
        return self.job.job_id

    @property
    def status(self) -> JobStatus:
        return self.job.status

    @property
    def articles_processed(self) -> int | None:
        return self.job.articles_processed

    @property
    def articles_skipped(self) -> int | None:
        return self.job.articles_skipped

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.job.to_dict(),
            "cached": self.cached,
            "daily_sentiment": [d.to_dict() for d in self.daily_sentiment],
        }


@dataclass
class ResultsView:
    """Daily sentiment read straight from the cache.

    `cached` is False when no sentiment has been cached for the ticker.
    """

    ticker: str
    start_date: str | None
    end_date: str | None
    daily_sentiment: list[DailySentiment]
    cached: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticker": self.ticker,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "daily_sentiment": [d.to_dict() for d in self.daily_sentiment],
            "cached": self.cached,
        }
