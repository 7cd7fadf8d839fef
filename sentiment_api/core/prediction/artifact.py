"""Model artifact: weights, bias and the paired scaler as one unit.

Weights are only meaningful together with the scaler they were trained
behind, so the two are always saved and loaded together.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import numpy as np

from sentiment_api.core.prediction.features import FEATURE_NAMES
from sentiment_api.core.prediction.model import LogisticRegression
from sentiment_api.core.prediction.scaler import FeatureScaler
from sentiment_api.domain.constants import (
    LR_LEARNING_RATE,
    LR_MAX_ITERATIONS,
    LR_REGULARIZATION,
    LR_TOLERANCE,
)
from sentiment_api.domain.exceptions import InvalidArgumentError, ModelLoadError

ARTIFACT_FORMAT_VERSION = 1


@dataclass
class ModelArtifact:
    """A fitted model with its scaler and feature layout."""

    model: LogisticRegression
    scaler: FeatureScaler
    feature_names: list[str] = field(default_factory=lambda: list(FEATURE_NAMES))
    horizon: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.model.is_fitted:
            raise ModelLoadError("Cannot build an artifact from an unfitted model")
        n_weights = len(self.model.weights)
        if self.scaler.n_features != n_weights:
            raise ModelLoadError(
                f"Scaler has {self.scaler.n_features} features but model has {n_weights} weights"
            )
        if len(self.feature_names) != n_weights:
            raise ModelLoadError(
                f"{len(self.feature_names)} feature names for {n_weights} weights"
            )

    def predict_proba(self, raw_features: Any) -> np.ndarray:
        """Scale raw features with the stored scaler, then score them."""
        return self.model.predict_proba(self.scaler.transform(np.atleast_2d(raw_features)))

    def predict(self, raw_features: Any) -> np.ndarray:
        return self.model.predict(self.scaler.transform(np.atleast_2d(raw_features)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "format_version": ARTIFACT_FORMAT_VERSION,
            "created_at": self.metadata.get("created_at") or datetime.now(UTC).isoformat(),
            "horizon": self.horizon,
            "feature_names": list(self.feature_names),
            "model": {
                "weights": self.model.weights.tolist(),
                "bias": self.model.bias,
                "learning_rate": self.model.learning_rate,
                "max_iterations": self.model.max_iterations,
                "regularization": self.model.regularization,
                "tolerance": self.model.tolerance,
            },
            "scaler": self.scaler.to_dict(),
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], model_path: str | None = None) -> ModelArtifact:
        """Rebuild an artifact.

        Raises:
            ModelLoadError: Missing weights or missing/invalid scaler
        """
        model_data = data.get("model")
        if not model_data or model_data.get("weights") is None:
            raise ModelLoadError("Artifact has no model weights", model_path=model_path)
        if not data.get("scaler"):
            raise ModelLoadError(
                "Artifact has weights but no paired scaler", model_path=model_path
            )

        model = LogisticRegression(
            learning_rate=model_data.get("learning_rate", LR_LEARNING_RATE),
            max_iterations=model_data.get("max_iterations", LR_MAX_ITERATIONS),
            regularization=model_data.get("regularization", LR_REGULARIZATION),
            tolerance=model_data.get("tolerance", LR_TOLERANCE),
        )
        model.weights = np.asarray(model_data["weights"], dtype=np.float64)
        model.bias = float(model_data.get("bias", 0.0))

        try:
            scaler = FeatureScaler.from_dict(data["scaler"])
        except (KeyError, InvalidArgumentError) as e:
            raise ModelLoadError(f"Invalid scaler: {e}", model_path=model_path) from e

        return cls(
            model=model,
            scaler=scaler,
            feature_names=list(data.get("feature_names") or FEATURE_NAMES),
            horizon=data.get("horizon"),
            metadata=data.get("metadata") or {},
        )

    def save(self, path: Path | str) -> Path:
        """Write the artifact as JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)
        return path

    @classmethod
    def load(cls, path: Path | str) -> ModelArtifact:
        """Read an artifact written by `save`."""
        path = Path(path)
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ModelLoadError(f"Cannot read model artifact: {e}", model_path=str(path)) from e
        return cls.from_dict(data, model_path=str(path))
