"""Tests for feature engineering, labels and scaling."""

import numpy as np
import pytest

from sentiment_api.core.prediction import (
    FEATURE_NAMES,
    FeatureScaler,
    build_feature_frame,
    build_feature_matrix,
    create_labels,
)
from sentiment_api.core.prediction.features import compute_price_features
from sentiment_api.domain.entities import Classification, DailySentiment, PriceBar
from sentiment_api.domain.exceptions import InvalidArgumentError, ModelNotFittedError


def price_bar(day: str, close: float, volume: float = 1000.0) -> PriceBar:
    return PriceBar("AAPL", day, close, close * 1.1, close * 0.9, close, volume)


def daily(day: str, positive: int, negative: int, classification: Classification) -> DailySentiment:
    total = positive + negative
    return DailySentiment(
        date=day,
        positive_total=positive,
        negative_total=negative,
        score=(positive - negative) / total if total else 0.0,
        classification=classification,
        article_count=1,
    )


# ============================================================================
# Price features
# ============================================================================


def test_price_features_use_previous_day():
    bars = [
        price_bar("2025-01-03", 99.0, volume=1500.0),
        price_bar("2025-01-01", 100.0, volume=1000.0),
        price_bar("2025-01-02", 110.0, volume=2000.0),
    ]

    features = compute_price_features(bars)

    assert list(features["date"]) == ["2025-01-02", "2025-01-03"]
    assert features["price_change_pct"].tolist() == pytest.approx([0.1, -0.1])
    assert features["volume_change_pct"].tolist() == pytest.approx([1.0, -0.25])
    assert features["volatility"].tolist() == pytest.approx([0.2, 0.2])


def test_price_features_drop_zero_denominators():
    bars = [
        price_bar("2025-01-01", 100.0, volume=0.0),
        price_bar("2025-01-02", 101.0),
        price_bar("2025-01-03", 102.0),
    ]

    features = compute_price_features(bars)

    assert list(features["date"]) == ["2025-01-03"]
    assert compute_price_features([]).empty


# ============================================================================
# Joined frame
# ============================================================================


def test_feature_frame_inner_joins_on_date():
    bars = [price_bar(f"2025-01-0{d}", 100.0 + d) for d in range(1, 6)]
    sentiment = [
        daily("2025-01-02", 3, 1, Classification.POS),
        daily("2025-01-04", 0, 2, Classification.NEG),
        daily("2025-01-09", 1, 0, Classification.POS),
    ]

    frame = build_feature_frame(bars, sentiment)

    assert list(frame.columns) == ["date", "close", *FEATURE_NAMES]
    assert list(frame["date"]) == ["2025-01-02", "2025-01-04"]
    first = frame.iloc[0]
    assert first["sentiment_positive"] == 3.0
    assert first["sentiment_score"] == pytest.approx(0.5)
    assert (first["is_pos"], first["is_neg"], first["is_neut"]) == (1.0, 0.0, 0.0)


def test_feature_matrix_shape():
    bars = [price_bar(f"2025-01-0{d}", 100.0 + d) for d in range(1, 4)]
    sentiment = [daily(f"2025-01-0{d}", 1, 1, Classification.NEUT) for d in range(1, 4)]

    matrix = build_feature_matrix(bars, sentiment)

    assert matrix.shape == (2, len(FEATURE_NAMES))
    assert matrix.dtype == np.float64
    assert build_feature_matrix([], []).shape == (0, len(FEATURE_NAMES))


# ============================================================================
# Labels
# ============================================================================


def test_create_labels_marks_price_drops():
    close = [10.0, 12.0, 9.0, 15.0]

    assert create_labels(close, 1).tolist() == [0, 1, 0]
    assert create_labels(close, 2).tolist() == [1, 0]
    assert create_labels(close, 4).tolist() == []


def test_create_labels_equal_prices_are_not_drops():
    assert create_labels([5.0, 5.0], 1).tolist() == [0]


def test_create_labels_rejects_bad_horizon():
    with pytest.raises(InvalidArgumentError):
        create_labels([1.0, 2.0], 0)


# ============================================================================
# Scaler
# ============================================================================


def test_scaler_standardizes_with_population_std():
    scaler = FeatureScaler().fit([[1.0, 10.0], [3.0, 10.0]])

    assert scaler.mean.tolist() == [2.0, 10.0]
    assert scaler.std.tolist() == [1.0, 0.0]
    assert scaler.transform([[1.0, 10.0], [3.0, 99.0]]).tolist() == [[-1.0, 0.0], [1.0, 0.0]]


def test_scaler_inverse_transform():
    data = np.array([[1.0, 4.0], [3.0, 8.0], [5.0, 0.0]])
    scaler = FeatureScaler()

    scaled = scaler.fit_transform(data)

    np.testing.assert_allclose(scaler.inverse_transform(scaled), data)


def test_scaler_single_row_keeps_shape():
    scaler = FeatureScaler().fit([[0.0, 0.0], [2.0, 4.0]])
    assert scaler.transform([2.0, 4.0]).tolist() == [1.0, 1.0]


def test_scaler_serialization_roundtrip():
    data = np.array([[1.0, 2.0, 7.0], [2.0, 4.0, 7.0], [4.0, 9.0, 7.0]])
    scaler = FeatureScaler().fit(data)

    restored = FeatureScaler.from_dict(scaler.to_dict())

    np.testing.assert_allclose(restored.transform(data), scaler.transform(data))
    assert restored.n_features == 3


def test_scaler_errors():
    with pytest.raises(ModelNotFittedError):
        FeatureScaler().transform([[1.0]])
    with pytest.raises(InvalidArgumentError):
        FeatureScaler().fit([[1.0, np.nan]])
    with pytest.raises(InvalidArgumentError):
        FeatureScaler().fit(np.empty((0, 3)))
    with pytest.raises(InvalidArgumentError):
        FeatureScaler().fit([[1.0, 2.0]]).transform([[1.0]])
