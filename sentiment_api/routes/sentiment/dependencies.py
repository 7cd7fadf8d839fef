"""Dependency injection for sentiment endpoints."""

from typing import Annotated

from fastapi import Depends

from sentiment_api.core.config import get_max_concurrency
from sentiment_api.core.sentiment import SentimentAnalyzer, SentimentScorer
from sentiment_api.core.sentiment_jobs import SentimentJobOrchestrator
from sentiment_api.routes.dependencies import get_store_handle
from sentiment_api.storage import StoreHandle


def get_sentiment_analyzer() -> SentimentScorer:
    """Get the sentiment scorer implementation."""
    return SentimentAnalyzer()


def get_orchestrator(
    store: Annotated[StoreHandle, Depends(get_store_handle)],
    analyzer: Annotated[SentimentScorer, Depends(get_sentiment_analyzer)],
) -> SentimentJobOrchestrator:
    """Get a job orchestrator bound to the app's store handle."""
    return SentimentJobOrchestrator(store, analyzer, max_concurrency=get_max_concurrency())
