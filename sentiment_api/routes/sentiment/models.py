"""Request and response models for sentiment endpoints."""

from typing import Any

from pydantic import BaseModel, Field

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


# ============================================================================
# Job models
# ============================================================================


class SentimentJobRequest(BaseModel):
    """Request model for triggering a sentiment job."""

    ticker: str = Field(..., min_length=1, max_length=10, description="Stock ticker")
    start_date: str = Field(..., pattern=DATE_PATTERN, description="Range start (YYYY-MM-DD)")
    end_date: str = Field(..., pattern=DATE_PATTERN, description="Range end (YYYY-MM-DD)")
    wait: bool = Field(
        True,
        description="Run the job within the request. If false, schedule it and poll status.",
    )


class DailySentimentResponse(BaseModel):
    """Aggregated sentiment for one date."""

    date: str
    positive_total: int
    negative_total: int
    score: float
    classification: str
    article_count: int


class SentimentJobResponse(BaseModel):
    """Job status, optionally with the daily sentiment it produced."""

    job_id: str
    status: str
    ticker: str
    start_date: str
    end_date: str
    started_at: int
    completed_at: int | None = None
    articles_processed: int | None = None
    articles_skipped: int | None = None
    duration_ms: int | None = None
    error: str | None = None
    cached: bool | None = None
    daily_sentiment: list[DailySentimentResponse] = Field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SentimentJobResponse":
        return cls(**data)


# ============================================================================
# Results models
# ============================================================================


class SentimentResultsResponse(BaseModel):
    """Daily sentiment read from the cache."""

    ticker: str
    start_date: str | None
    end_date: str | None
    daily_sentiment: list[DailySentimentResponse]
    cached: bool
