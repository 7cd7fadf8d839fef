"""Feature preprocessing and direction prediction."""

from sentiment_api.core.prediction.artifact import ModelArtifact
from sentiment_api.core.prediction.cross_validation import (
    CVFold,
    CVResults,
    LogisticRegressionCV,
    cross_validate,
    k_fold_split,
)
from sentiment_api.core.prediction.features import (
    FEATURE_NAMES,
    build_feature_frame,
    build_feature_matrix,
    create_labels,
)
from sentiment_api.core.prediction.model import LogisticRegression, sigmoid
from sentiment_api.core.prediction.scaler import FeatureScaler
from sentiment_api.core.prediction.service import (
    HorizonPrediction,
    PredictionOutput,
    predict_direction,
    predict_from_cache,
)

__all__ = [
    "FEATURE_NAMES",
    "CVFold",
    "CVResults",
    "FeatureScaler",
    "HorizonPrediction",
    "LogisticRegression",
    "LogisticRegressionCV",
    "ModelArtifact",
    "PredictionOutput",
    "build_feature_frame",
    "build_feature_matrix",
    "create_labels",
    "cross_validate",
    "k_fold_split",
    "predict_direction",
    "predict_from_cache",
    "sigmoid",
]
