"""Feature engineering for direction prediction.

Joins daily price bars with daily sentiment by date. Price-derived
features need the previous trading day, so they are computed over the
full sorted price series before the join.
"""

from collections.abc import Sequence

import numpy as np
import pandas as pd

from sentiment_api.domain.entities import Classification, DailySentiment, PriceBar
from sentiment_api.domain.exceptions import InvalidArgumentError

FEATURE_NAMES = [
    "sentiment_positive",
    "sentiment_negative",
    "sentiment_score",
    "price_change_pct",
    "volume_change_pct",
    "volatility",
    "is_pos",
    "is_neg",
    "is_neut",
]

PRICE_COLUMNS = ["date", "open", "high", "low", "close", "volume"]


def compute_price_features(price_bars: Sequence[PriceBar]) -> pd.DataFrame:
    """Compute per-day price features from OHLCV bars.

    Args:
        price_bars: Daily bars in any order (duplicate dates keep the last)

    Returns:
        DataFrame with columns: date, close, price_change_pct,
        volume_change_pct, volatility. The first day (no previous bar) and
        days with a zero previous close, previous volume or close are
        dropped.
    """
    if not price_bars:
        return pd.DataFrame(
            columns=["date", "close", "price_change_pct", "volume_change_pct", "volatility"]
        )

    df = pd.DataFrame(
        [[bar.date, bar.open, bar.high, bar.low, bar.close, bar.volume] for bar in price_bars],
        columns=PRICE_COLUMNS,
    )
    df = df.drop_duplicates("date", keep="last").sort_values("date").reset_index(drop=True)

    prev_close = df["close"].shift(1).replace(0, np.nan)
    prev_volume = df["volume"].shift(1).replace(0, np.nan)
    close = df["close"].replace(0, np.nan)

    features = pd.DataFrame(
        {
            "date": df["date"],
            "close": df["close"].astype(float),
            "price_change_pct": (df["close"] - prev_close) / prev_close,
            "volume_change_pct": (df["volume"] - prev_volume) / prev_volume,
            "volatility": (df["high"] - df["low"]) / close,
        }
    )
    features = features.replace([np.inf, -np.inf], np.nan).dropna()
    return features.reset_index(drop=True)


def compute_sentiment_features(daily_sentiment: Sequence[DailySentiment]) -> pd.DataFrame:
    """Tabulate daily sentiment with a one-hot of the day's classification."""
    rows = [
        {
            "date": day.date,
            "sentiment_positive": float(day.positive_total),
            "sentiment_negative": float(day.negative_total),
            "sentiment_score": float(day.score),
            "is_pos": float(day.classification == Classification.POS),
            "is_neg": float(day.classification == Classification.NEG),
            "is_neut": float(day.classification == Classification.NEUT),
        }
        for day in daily_sentiment
    ]
    columns = ["date", "sentiment_positive", "sentiment_negative", "sentiment_score",
               "is_pos", "is_neg", "is_neut"]
    return pd.DataFrame(rows, columns=columns).drop_duplicates("date", keep="last")


def build_feature_frame(
    price_bars: Sequence[PriceBar],
    daily_sentiment: Sequence[DailySentiment],
) -> pd.DataFrame:
    """Join price and sentiment features by date.

    Only days present in both inputs survive; nothing is imputed.

    Returns:
        DataFrame sorted by date with columns: date, close, *FEATURE_NAMES
    """
    prices = compute_price_features(price_bars)
    sentiment = compute_sentiment_features(daily_sentiment)

    joined = prices.merge(sentiment, on="date", how="inner")
    joined = joined.sort_values("date").reset_index(drop=True)
    return joined[["date", "close", *FEATURE_NAMES]]


def build_feature_matrix(
    price_bars: Sequence[PriceBar],
    daily_sentiment: Sequence[DailySentiment],
) -> np.ndarray:
    """Feature matrix of shape (n_days, len(FEATURE_NAMES)), float64."""
    frame = build_feature_frame(price_bars, daily_sentiment)
    return frame[FEATURE_NAMES].to_numpy(dtype=np.float64).reshape(-1, len(FEATURE_NAMES))


def create_labels(close: Sequence[float] | np.ndarray, horizon: int) -> np.ndarray:
    """Direction labels for a horizon.

    label[i] = 1 when close[i] > close[i + horizon] (price dropped), else 0.

    Args:
        close: Close prices in date order
        horizon: Days ahead, >= 1

    Returns:
        Integer array of length max(len(close) - horizon, 0)
    """
    if horizon < 1:
        raise InvalidArgumentError(
            f"horizon must be >= 1, got {horizon}", field="horizon", value=horizon
        )
    prices = np.asarray(close, dtype=np.float64)
    if len(prices) <= horizon:
        return np.array([], dtype=np.int64)
    return (prices[:-horizon] > prices[horizon:]).astype(np.int64)
