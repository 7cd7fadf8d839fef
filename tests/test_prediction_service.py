"""Tests for the direction prediction service."""

import math
from datetime import date, timedelta

import numpy as np
import pytest

from sentiment_api.core.prediction import (
    FEATURE_NAMES,
    build_feature_matrix,
    predict_direction,
    predict_from_cache,
)
from sentiment_api.core.utils import generate_article_hash
from sentiment_api.domain.entities import (
    Article,
    Classification,
    DailySentiment,
    SentimentRecord,
)
from sentiment_api.domain.exceptions import InsufficientDataError, InvalidArgumentError
from sentiment_api.domain.services import classify_sentiment, compute_sentiment_score

START = date(2025, 1, 1)


def synthetic_closes(n: int) -> list[float]:
    return [100.0 + 5.0 * math.sin(i / 3.0) + 0.2 * i for i in range(n)]


def synthetic_sentiment(n: int, every: int = 1) -> list[DailySentiment]:
    days = []
    for i in range(0, n, every):
        positive, negative = i % 4, (i + 2) % 3
        score = compute_sentiment_score(positive, negative)
        days.append(
            DailySentiment(
                date=(START + timedelta(days=i)).isoformat(),
                positive_total=positive,
                negative_total=negative,
                score=score,
                classification=classify_sentiment(score),
                article_count=1,
            )
        )
    return days


def test_predicts_every_horizon(make_price_bars):
    bars = make_price_bars("AAPL", START, synthetic_closes(40))

    output = predict_direction("aapl", bars, synthetic_sentiment(40))

    assert output.ticker == "AAPL"
    assert output.n_data_points == 39
    assert output.as_of == (START + timedelta(days=39)).isoformat()
    assert set(output.predictions) == {"next", "week", "month"}

    expected_samples = {"next": 38, "week": 29, "month": 18}
    for name, prediction in output.predictions.items():
        assert prediction.prediction in (0, 1)
        assert 0.0 <= prediction.probability_down <= 1.0
        assert prediction.n_samples == expected_samples[name]
        assert len(prediction.cv.scores) == 8
        assert 0.0 <= prediction.cv.mean_score <= 1.0

        artifact = output.artifacts[name]
        assert artifact.feature_names == FEATURE_NAMES
        assert artifact.horizon == prediction.days


def test_artifact_reproduces_prediction(make_price_bars):
    bars = make_price_bars("AAPL", START, synthetic_closes(40))
    sentiment = synthetic_sentiment(40)

    output = predict_direction("AAPL", bars, sentiment)

    last_row = build_feature_matrix(bars, sentiment)[-1]
    for name, prediction in output.predictions.items():
        probability = output.artifacts[name].predict_proba(last_row)[0]
        assert probability == pytest.approx(prediction.probability_down)


def test_prediction_is_deterministic(make_price_bars):
    bars = make_price_bars("AAPL", START, synthetic_closes(40))
    sentiment = synthetic_sentiment(40)

    first = predict_direction("AAPL", bars, sentiment)
    second = predict_direction("AAPL", bars, sentiment)

    for name in first.predictions:
        assert (
            first.predictions[name].probability_down
            == second.predictions[name].probability_down
        )
        np.testing.assert_array_equal(
            first.artifacts[name].model.weights, second.artifacts[name].model.weights
        )


def test_days_without_sentiment_are_dropped(make_price_bars):
    bars = make_price_bars("AAPL", START, synthetic_closes(80))

    output = predict_direction("AAPL", bars, synthetic_sentiment(80, every=2))

    assert output.n_data_points == 39


def test_insufficient_data(make_price_bars):
    bars = make_price_bars("AAPL", START, synthetic_closes(20))

    with pytest.raises(InsufficientDataError) as exc_info:
        predict_direction("AAPL", bars, synthetic_sentiment(20))

    assert exc_info.value.required == 29
    assert exc_info.value.available == 19


def test_missing_ticker(make_price_bars):
    with pytest.raises(InvalidArgumentError):
        predict_direction("", make_price_bars("AAPL", START, [1.0]), [])


def test_output_to_dict(make_price_bars):
    bars = make_price_bars("AAPL", START, synthetic_closes(40))

    data = predict_direction("AAPL", bars, synthetic_sentiment(40)).to_dict()

    assert data["predictions"]["week"]["days"] == 10
    assert data["predictions"]["month"]["horizon"] == "month"
    assert "artifacts" not in data
    assert data["duration_ms"] >= 0


@pytest.mark.asyncio
async def test_predict_from_cache(store, make_price_bars):
    await store.stocks.put_price_bars(make_price_bars("AAPL", START, synthetic_closes(40)))

    articles, records = [], []
    for day in synthetic_sentiment(40):
        article_hash = generate_article_hash(f"https://news.example.com/aapl/{day.date}")
        articles.append(Article("AAPL", article_hash, day.date, "headline"))
        records.append(
            SentimentRecord(
                ticker="AAPL",
                article_hash=article_hash,
                positive_count=day.positive_total,
                negative_count=day.negative_total,
                score=day.score,
                classification=Classification(day.classification),
                analyzed_at=0,
            )
        )
    await store.news.batch_put_articles(articles)
    await store.sentiment.batch_put_sentiments(records)

    output = await predict_from_cache(store, "aapl", "2025-01-01", "2025-03-31")

    assert output.ticker == "AAPL"
    assert output.n_data_points == 39
    assert set(output.predictions) == {"next", "week", "month"}


@pytest.mark.asyncio
async def test_predict_from_cache_without_data(store):
    with pytest.raises(InsufficientDataError):
        await predict_from_cache(store, "MSFT", "2025-01-01", "2025-03-31")
