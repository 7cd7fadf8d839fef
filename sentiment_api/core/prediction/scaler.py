"""Feature scaling for direction prediction.

Fits a StandardScaler on training data and applies it at inference.
The scaler is stored with the model artifact and never refit on
inference data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from sklearn.preprocessing import StandardScaler

from sentiment_api.domain.exceptions import InvalidArgumentError, ModelNotFittedError


def _as_matrix(X: Any) -> np.ndarray:
    matrix = np.asarray(X, dtype=np.float64)
    if matrix.ndim == 1:
        matrix = matrix.reshape(1, -1)
    if matrix.ndim != 2:
        raise InvalidArgumentError(f"Expected a 2D matrix, got {matrix.ndim} dimensions")
    if not np.all(np.isfinite(matrix)):
        raise InvalidArgumentError("Input contains NaN or infinite values")
    return matrix


@dataclass
class FeatureScaler:
    """Standardizes features to zero mean and unit (population) variance.

    Wraps sklearn StandardScaler. Columns that were constant during fit
    transform to 0.0 instead of being passed through.
    """

    scaler: StandardScaler = field(default_factory=StandardScaler)
    is_fitted: bool = False

    def fit(self, X: Any) -> FeatureScaler:
        """Fit on training features.

        Args:
            X: Training features, shape (n_samples, n_features)

        Returns:
            Self for chaining.
        """
        matrix = _as_matrix(X)
        if matrix.size == 0:
            raise InvalidArgumentError("Cannot fit scaler on empty data")
        self.scaler.fit(matrix)
        self.is_fitted = True
        return self

    def _check_fitted(self) -> None:
        if not self.is_fitted:
            raise ModelNotFittedError("Scaler must be fitted before transform")

    @property
    def mean(self) -> np.ndarray:
        self._check_fitted()
        return self.scaler.mean_.copy()

    @property
    def std(self) -> np.ndarray:
        self._check_fitted()
        return np.sqrt(self.scaler.var_)

    @property
    def n_features(self) -> int:
        self._check_fitted()
        return int(self.scaler.n_features_in_)

    def _constant_columns(self) -> np.ndarray:
        return self.scaler.var_ == 0

    def transform(self, X: Any) -> np.ndarray:
        """Scale features with the fitted mean/std.

        Args:
            X: Features, shape (n_samples, n_features) or (n_features,)

        Returns:
            Scaled features with the same shape.
        """
        self._check_fitted()
        single = np.asarray(X).ndim == 1
        matrix = _as_matrix(X)
        if matrix.shape[1] != self.n_features:
            raise InvalidArgumentError(
                f"Feature count mismatch. Expected {self.n_features}, got {matrix.shape[1]}"
            )

        result = self.scaler.transform(matrix)
        result[:, self._constant_columns()] = 0.0
        return result.flatten() if single else result

    def fit_transform(self, X: Any) -> np.ndarray:
        """Fit and transform in one step."""
        self.fit(X)
        return self.transform(X)

    def inverse_transform(self, X: Any) -> np.ndarray:
        """Map scaled features back to the original scale.

        Constant columns come back as their fitted mean.
        """
        self._check_fitted()
        single = np.asarray(X).ndim == 1
        matrix = _as_matrix(X)
        result = self.scaler.inverse_transform(matrix)
        result[:, self._constant_columns()] = self.scaler.mean_[self._constant_columns()]
        return result.flatten() if single else result

    def to_dict(self) -> dict[str, Any]:
        """Serialize fitted state."""
        self._check_fitted()
        return {
            "mean": self.scaler.mean_.tolist(),
            "std": self.std.tolist(),
            "n_samples_seen": int(self.scaler.n_samples_seen_),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FeatureScaler:
        """Rebuild a fitted scaler from `to_dict` output."""
        mean = np.asarray(data["mean"], dtype=np.float64)
        std = np.asarray(data["std"], dtype=np.float64)
        if mean.shape != std.shape or mean.ndim != 1:
            raise InvalidArgumentError("Scaler mean and std must be 1D and the same length")

        scaler = StandardScaler()
        scaler.mean_ = mean
        scaler.var_ = std**2
        scaler.scale_ = np.where(std == 0, 1.0, std)
        scaler.n_features_in_ = len(mean)
        scaler.n_samples_seen_ = int(data.get("n_samples_seen", 0))
        return cls(scaler=scaler, is_fitted=True)
