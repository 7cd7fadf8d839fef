"""Pollable sentiment analysis jobs."""

from sentiment_api.core.sentiment_jobs.models import PipelineOutcome, ResultsView, TriggerResult
from sentiment_api.core.sentiment_jobs.orchestrator import (
    SentimentJobOrchestrator,
    normalize_ticker,
)
from sentiment_api.core.sentiment_jobs.polling import JobPoller

__all__ = [
    "JobPoller",
    "PipelineOutcome",
    "ResultsView",
    "SentimentJobOrchestrator",
    "TriggerResult",
    "normalize_ticker",
]
