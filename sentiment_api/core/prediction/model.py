"""Binary logistic regression trained by batch gradient descent."""

from __future__ import annotations

import logging
from typing import Any

import numpy as np

from sentiment_api.domain.constants import (
    DECISION_THRESHOLD,
    LR_LEARNING_RATE,
    LR_MAX_ITERATIONS,
    LR_REGULARIZATION,
    LR_TOLERANCE,
)
from sentiment_api.domain.exceptions import (
    EmptyDatasetError,
    InvalidArgumentError,
    LengthMismatchError,
    ModelNotFittedError,
)

logger = logging.getLogger(__name__)

# Keeps log() finite when a probability saturates at 0 or 1
LOG_EPSILON = 1e-15

# exp() overflows float64 past ~709
SIGMOID_CLIP = 500.0


def sigmoid(z: np.ndarray | float) -> np.ndarray:
    """Numerically safe logistic function."""
    clipped = np.clip(z, -SIGMOID_CLIP, SIGMOID_CLIP)
    return 1.0 / (1.0 + np.exp(-clipped))


def validate_training_data(X: Any, y: Any) -> tuple[np.ndarray, np.ndarray]:
    """Coerce features/labels to arrays and check they pair up."""
    features = np.asarray(X, dtype=np.float64)
    labels = np.asarray(y, dtype=np.float64).reshape(-1)
    if features.size == 0 or labels.size == 0:
        raise EmptyDatasetError("Cannot fit on empty data")
    if features.ndim == 1:
        features = features.reshape(-1, 1)
    if features.shape[0] != labels.shape[0]:
        raise LengthMismatchError(
            f"X and y length mismatch. X={features.shape[0]}, y={labels.shape[0]}",
            expected=features.shape[0],
            actual=labels.shape[0],
        )
    return features, labels


class LogisticRegression:
    """L2-regularized logistic regression.

    Weights and bias start at zero, so training is fully deterministic.

    Args:
        learning_rate: Gradient descent step size
        max_iterations: Upper bound on full-batch updates
        regularization: C, the inverse regularization strength (alpha = 1/C)
        tolerance: Stop once the loss changes by less than this
    """

    def __init__(
        self,
        learning_rate: float = LR_LEARNING_RATE,
        max_iterations: int = LR_MAX_ITERATIONS,
        regularization: float = LR_REGULARIZATION,
        tolerance: float = LR_TOLERANCE,
    ):
        if regularization <= 0:
            raise InvalidArgumentError(
                "regularization must be > 0", field="regularization", value=regularization
            )
        self.learning_rate = learning_rate
        self.max_iterations = max_iterations
        self.regularization = regularization
        self.tolerance = tolerance

        self.weights: np.ndarray | None = None
        self.bias: float = 0.0
        self.converged: bool = False
        self.n_iterations: int = 0

    @property
    def is_fitted(self) -> bool:
        return self.weights is not None

    def fit(self, X: Any, y: Any) -> LogisticRegression:
        """Fit weights and bias by gradient descent on BCE + L2.

        Args:
            X: Features, shape (n_samples, n_features)
            y: Binary labels, shape (n_samples,)

        Returns:
            Self for chaining.
        """
        features, labels = validate_training_data(X, y)
        n_samples, n_features = features.shape
        alpha = 1.0 / self.regularization

        weights = np.zeros(n_features, dtype=np.float64)
        bias = 0.0
        prev_loss = np.inf
        self.converged = False
        self.n_iterations = 0

        for iteration in range(self.max_iterations):
            predictions = sigmoid(features @ weights + bias)
            error = predictions - labels

            grad_w = features.T @ error / n_samples + alpha * weights
            grad_b = error.mean()

            weights -= self.learning_rate * grad_w
            bias -= self.learning_rate * grad_b

            loss = -np.mean(
                labels * np.log(predictions + LOG_EPSILON)
                + (1 - labels) * np.log(1 - predictions + LOG_EPSILON)
            ) + (alpha / 2) * np.dot(weights, weights)

            self.n_iterations = iteration + 1
            if abs(prev_loss - loss) < self.tolerance:
                self.converged = True
                break
            prev_loss = loss

        if not self.converged:
            logger.debug(f"Did not converge after {self.max_iterations} iterations")

        self.weights = weights
        self.bias = float(bias)
        return self

    def _check_fitted(self) -> np.ndarray:
        if self.weights is None:
            raise ModelNotFittedError("Model not fitted. Call fit() first.")
        return self.weights

    def predict_proba(self, X: Any) -> np.ndarray:
        """Probability of the positive class (label 1) for each row."""
        weights = self._check_fitted()
        features = np.asarray(X, dtype=np.float64)
        if features.size == 0:
            return np.array([], dtype=np.float64)
        if features.ndim == 1:
            features = features.reshape(1, -1)
        if features.shape[1] != len(weights):
            raise InvalidArgumentError(
                f"Feature count mismatch. Expected {len(weights)}, got {features.shape[1]}"
            )
        return sigmoid(features @ weights + self.bias)

    def predict(self, X: Any) -> np.ndarray:
        """Class labels, thresholding probabilities at 0.5."""
        return (self.predict_proba(X) >= DECISION_THRESHOLD).astype(np.int64)

    def score(self, X: Any, y: Any) -> float:
        """Accuracy on (X, y)."""
        labels = np.asarray(y).reshape(-1)
        predictions = self.predict(X)
        if len(predictions) != len(labels):
            raise LengthMismatchError(
                f"X and y length mismatch. X={len(predictions)}, y={len(labels)}",
                expected=len(predictions),
                actual=len(labels),
            )
        if len(labels) == 0:
            raise EmptyDatasetError("Cannot score on empty data")
        return float(np.mean(predictions == labels))

    def get_params(self) -> dict[str, Any]:
        """Hyper-parameters and fitted state."""
        return {
            "learning_rate": self.learning_rate,
            "max_iterations": self.max_iterations,
            "regularization": self.regularization,
            "tolerance": self.tolerance,
            "weights": None if self.weights is None else self.weights.tolist(),
            "bias": self.bias,
            "converged": self.converged,
            "n_iterations": self.n_iterations,
        }
