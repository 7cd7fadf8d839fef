"""Domain entities."""

from sentiment_api.domain.entities.prices import PriceBar
from sentiment_api.domain.entities.sentiment import (
    Article,
    Classification,
    DailySentiment,
    JobStatus,
    SentimentJob,
    SentimentRecord,
)

__all__ = [
    "Article",
    "Classification",
    "DailySentiment",
    "JobStatus",
    "PriceBar",
    "SentimentJob",
    "SentimentRecord",
]
