"""Direction prediction service.

Builds features from cached prices and daily sentiment, then trains one
cross-validated logistic regression per horizon and predicts the most
recent day.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sentiment_api.core.prediction.artifact import ModelArtifact
from sentiment_api.core.prediction.cross_validation import CVResults, LogisticRegressionCV
from sentiment_api.core.prediction.features import (
    FEATURE_NAMES,
    build_feature_frame,
    create_labels,
)
from sentiment_api.core.prediction.scaler import FeatureScaler
from sentiment_api.core.utils import normalize_ticker
from sentiment_api.domain.constants import (
    DEFAULT_CV_FOLDS,
    MIN_PREDICTION_DATA_POINTS,
    PREDICTION_HORIZONS,
)
from sentiment_api.domain.entities import DailySentiment, PriceBar
from sentiment_api.domain.exceptions import InsufficientDataError
from sentiment_api.domain.services import aggregate_daily_sentiment

if TYPE_CHECKING:
    from sentiment_api.storage.handle import StoreHandle

logger = logging.getLogger(__name__)


@dataclass
class HorizonPrediction:
    """Prediction for one horizon. 0 = price expected up, 1 = down."""

    name: str
    days: int
    prediction: int
    probability_down: float
    cv: CVResults
    n_samples: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "horizon": self.name,
            "days": self.days,
            "prediction": self.prediction,
            "probability_down": self.probability_down,
            "cv": self.cv.to_dict(),
            "n_samples": self.n_samples,
        }


@dataclass
class PredictionOutput:
    """Per-horizon predictions for a ticker."""

    ticker: str
    as_of: str
    n_data_points: int
    predictions: dict[str, HorizonPrediction] = field(default_factory=dict)
    artifacts: dict[str, ModelArtifact] = field(default_factory=dict, repr=False)
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticker": self.ticker,
            "as_of": self.as_of,
            "n_data_points": self.n_data_points,
            "predictions": {name: p.to_dict() for name, p in self.predictions.items()},
            "duration_ms": self.duration_ms,
        }


def predict_direction(
    ticker: str,
    price_bars: Sequence[PriceBar],
    daily_sentiment: Sequence[DailySentiment],
    horizons: Mapping[str, int] = PREDICTION_HORIZONS,
    k: int = DEFAULT_CV_FOLDS,
) -> PredictionOutput:
    """Predict price direction for each horizon.

    For each horizon: label the joined rows, keep the rows that have a
    label, fit a fresh scaler on them, run fit_cv, then score the most
    recent row through that same scaler.

    Args:
        ticker: Stock ticker
        price_bars: Daily OHLCV bars
        daily_sentiment: Daily aggregated sentiment
        horizons: Horizon name -> days ahead
        k: Cross-validation folds

    Returns:
        PredictionOutput with one HorizonPrediction (and its artifact) per horizon

    Raises:
        InvalidArgumentError: Missing or malformed ticker
        InsufficientDataError: Fewer joined days than required
    """
    ticker = normalize_ticker(ticker)

    start = time.perf_counter()
    frame = build_feature_frame(price_bars, daily_sentiment)
    n_rows = len(frame)
    if n_rows < MIN_PREDICTION_DATA_POINTS:
        raise InsufficientDataError(
            f"Insufficient data: need at least {MIN_PREDICTION_DATA_POINTS} data points, got {n_rows}",
            required=MIN_PREDICTION_DATA_POINTS,
            available=n_rows,
        )

    logger.info(f"Generating predictions for {ticker} ({n_rows} data points)")

    features = frame[FEATURE_NAMES].to_numpy(dtype=float)
    close = frame["close"].to_numpy(dtype=float)
    most_recent = features[-1:]

    output = PredictionOutput(
        ticker=ticker,
        as_of=str(frame["date"].iloc[-1]),
        n_data_points=n_rows,
    )

    for name, days in horizons.items():
        labels = create_labels(close, days)
        if len(labels) < k:
            raise InsufficientDataError(
                f"Insufficient data for {name} prediction (horizon={days}): "
                f"need at least {days + k} data points",
                required=days + k,
                available=n_rows,
            )

        scaler = FeatureScaler()
        X_train = scaler.fit_transform(features[: len(labels)])

        model = LogisticRegressionCV()
        model.fit_cv(X_train, labels, k=k)

        probability = float(model.predict_proba(scaler.transform(most_recent))[0])
        prediction = int(model.predict(scaler.transform(most_recent))[0])
        logger.info(f"{ticker} {name}: CV score = {model.mean_cv_score:.4f}")

        output.predictions[name] = HorizonPrediction(
            name=name,
            days=days,
            prediction=prediction,
            probability_down=probability,
            cv=model.cv_results,
            n_samples=len(labels),
        )
        output.artifacts[name] = ModelArtifact(
            model=model,
            scaler=scaler,
            horizon=days,
            metadata={
                "ticker": ticker,
                "as_of": output.as_of,
                "cv": model.cv_results.to_dict(),
            },
        )

    output.duration_ms = round((time.perf_counter() - start) * 1000, 2)
    summary = ", ".join(f"{n}={p.prediction}" for n, p in output.predictions.items())
    logger.info(f"Predictions for {ticker}: {summary} ({output.duration_ms}ms)")
    return output


async def predict_from_cache(
    store: StoreHandle,
    ticker: str,
    start_date: str,
    end_date: str,
) -> PredictionOutput:
    """Predict using cached prices and cached article sentiment for a range."""
    ticker = normalize_ticker(ticker)
    price_bars = await store.stocks.query_by_date_range(ticker, start_date, end_date)
    articles = await store.news.query_by_date_range(ticker, start_date, end_date)
    records = await store.sentiment.query_by_ticker(ticker)
    daily = aggregate_daily_sentiment(records, articles)
    return predict_direction(ticker, price_bars, daily)
