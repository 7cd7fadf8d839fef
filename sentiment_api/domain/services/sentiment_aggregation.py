"""Sentiment aggregation domain service.

Pure functions for classifying sentiment scores and rolling article-level
sentiment up into daily scores.
"""

from collections import defaultdict
from collections.abc import Iterable

from sentiment_api.domain.constants import NEGATIVE_THRESHOLD, POSITIVE_THRESHOLD
from sentiment_api.domain.entities.sentiment import (
    Article,
    Classification,
    DailySentiment,
    SentimentRecord,
)


def compute_sentiment_score(positive: int, negative: int) -> float:
    """Compute a normalized sentiment score from positive/negative counts.

    score = (positive - negative) / (positive + negative), or 0.0 when
    there is nothing to count.

    Args:
        positive: Positive count
        negative: Negative count

    Returns:
        Score in range [-1, 1]
    """
    total = positive + negative
    if total == 0:
        return 0.0
    return (positive - negative) / total


def classify_sentiment(score: float) -> Classification:
    """Classify a sentiment score using the shared thresholds.

    Args:
        score: Score from -1 to 1

    Returns:
        POS above +0.1, NEG below -0.1, otherwise NEUT
    """
    if score > POSITIVE_THRESHOLD:
        return Classification.POS
    if score < NEGATIVE_THRESHOLD:
        return Classification.NEG
    return Classification.NEUT


def filter_articles_by_date_range(
    articles: Iterable[Article],
    start_date: str | None = None,
    end_date: str | None = None,
) -> list[Article]:
    """Keep articles whose date lies in [start_date, end_date].

    Dates are ISO strings, so lexicographic comparison is chronological.
    A missing bound is open.
    """
    return [
        article
        for article in articles
        if (start_date is None or article.date >= start_date)
        and (end_date is None or article.date <= end_date)
    ]


def aggregate_daily_sentiment(
    records: Iterable[SentimentRecord],
    articles: Iterable[Article],
) -> list[DailySentiment]:
    """Aggregate article-level sentiment into daily sentiment.

    Records are grouped by the date of their matching article; records whose
    article is unknown are dropped. Per date the positive and negative counts
    are summed, scored and classified.

    Args:
        records: Article-level sentiment records
        articles: Articles supplying the date for each hash

    Returns:
        One DailySentiment per date, sorted ascending by date
    """
    article_dates = {article.article_hash: article.date for article in articles}

    groups: dict[str, list[SentimentRecord]] = defaultdict(list)
    for record in records:
        date = article_dates.get(record.article_hash)
        if date is None:
            continue
        groups[date].append(record)

    daily: list[DailySentiment] = []
    for date, day_records in groups.items():
        positive_total = sum(r.positive_count for r in day_records)
        negative_total = sum(r.negative_count for r in day_records)
        score = compute_sentiment_score(positive_total, negative_total)

        daily.append(
            DailySentiment(
                date=date,
                positive_total=positive_total,
                negative_total=negative_total,
                score=score,
                classification=classify_sentiment(score),
                article_count=len(day_records),
            )
        )

    return sorted(daily, key=lambda d: d.date)
