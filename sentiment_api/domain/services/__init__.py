"""Domain services (pure business logic)."""

from sentiment_api.domain.services.sentiment_aggregation import (
    aggregate_daily_sentiment,
    classify_sentiment,
    compute_sentiment_score,
    filter_articles_by_date_range,
)

__all__ = [
    "aggregate_daily_sentiment",
    "classify_sentiment",
    "compute_sentiment_score",
    "filter_articles_by_date_range",
]
