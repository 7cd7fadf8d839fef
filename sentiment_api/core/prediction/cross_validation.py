"""Sequential k-fold cross-validation for LogisticRegression.

Folds are contiguous and never shuffled, so results are reproducible and
time order is respected within each fold.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from sentiment_api.core.prediction.model import LogisticRegression, validate_training_data
from sentiment_api.domain.constants import DEFAULT_CV_FOLDS
from sentiment_api.domain.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CVFold:
    """Train/test indices for one fold."""

    train_indices: np.ndarray
    test_indices: np.ndarray


@dataclass
class CVResults:
    """Per-fold accuracies with their mean and population std."""

    scores: list[float] = field(default_factory=list)
    mean_score: float = 0.0
    std_score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "scores": list(self.scores),
            "mean_score": self.mean_score,
            "std_score": self.std_score,
        }


def k_fold_split(n_samples: int, k: int) -> list[CVFold]:
    """Partition indices 0..n_samples-1 into k contiguous folds.

    Every fold but the last has n_samples // k test indices; the last fold
    takes the remainder.

    Raises:
        InvalidArgumentError: If k < 2 or k > n_samples
    """
    if k < 2:
        raise InvalidArgumentError(f"k must be >= 2, got {k}", field="k", value=k)
    if k > n_samples:
        raise InvalidArgumentError(
            f"k={k} cannot be greater than n_samples={n_samples}", field="k", value=k
        )

    fold_size = n_samples // k
    indices = np.arange(n_samples)
    folds = []
    for i in range(k):
        test_start = i * fold_size
        test_end = n_samples if i == k - 1 else (i + 1) * fold_size
        test_mask = (indices >= test_start) & (indices < test_end)
        folds.append(CVFold(train_indices=indices[~test_mask], test_indices=indices[test_mask]))
    return folds


def cross_validate(X: Any, y: Any, k: int, **model_params: Any) -> CVResults:
    """Train one model per fold and score it on the held-out fold.

    Args:
        X: Features, shape (n_samples, n_features)
        y: Binary labels
        k: Number of folds
        **model_params: Passed to each fold's LogisticRegression

    Returns:
        CVResults with per-fold accuracy, mean and population std
    """
    features, labels = validate_training_data(X, y)

    scores = []
    for fold in k_fold_split(len(features), k):
        model = LogisticRegression(**model_params)
        model.fit(features[fold.train_indices], labels[fold.train_indices])
        scores.append(model.score(features[fold.test_indices], labels[fold.test_indices]))

    return CVResults(
        scores=scores,
        mean_score=float(np.mean(scores)),
        std_score=float(np.std(scores)),
    )


class LogisticRegressionCV(LogisticRegression):
    """LogisticRegression that records cross-validation diagnostics.

    CV scores never gate the final fit: `fit_cv` always trains on the full
    dataset afterwards.
    """

    def __init__(self, **model_params: Any):
        super().__init__(**model_params)
        self._model_params = model_params
        self.cv_results: CVResults | None = None

    def fit_cv(self, X: Any, y: Any, k: int = DEFAULT_CV_FOLDS) -> LogisticRegressionCV:
        """Cross-validate, then fit on all of (X, y).

        Raises:
            EmptyDatasetError: Zero-length input
            LengthMismatchError: X and y differ in length
        """
        features, labels = validate_training_data(X, y)
        self.cv_results = cross_validate(features, labels, k, **self._model_params)
        logger.debug(
            f"CV k={k}: mean={self.cv_results.mean_score:.4f} "
            f"std={self.cv_results.std_score:.4f}"
        )
        self.fit(features, labels)
        return self

    @property
    def cv_scores(self) -> list[float]:
        return self.cv_results.scores if self.cv_results else []

    @property
    def mean_cv_score(self) -> float | None:
        return self.cv_results.mean_score if self.cv_results else None
