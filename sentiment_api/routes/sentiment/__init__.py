"""Sentiment job endpoints.

Trigger analysis jobs for a ticker and date range, poll their status, and
read aggregated daily sentiment straight from the cache.
"""

from sentiment_api.routes.sentiment.dependencies import get_orchestrator, get_sentiment_analyzer
from sentiment_api.routes.sentiment.endpoints import router
from sentiment_api.routes.sentiment.models import (
    DailySentimentResponse,
    SentimentJobRequest,
    SentimentJobResponse,
    SentimentResultsResponse,
)

__all__ = [
    "router",
    # Models
    "DailySentimentResponse",
    "SentimentJobRequest",
    "SentimentJobResponse",
    "SentimentResultsResponse",
    # Dependencies
    "get_orchestrator",
    "get_sentiment_analyzer",
]
