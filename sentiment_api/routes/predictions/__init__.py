"""Direction prediction endpoints."""

from sentiment_api.routes.predictions.endpoints import router
from sentiment_api.routes.predictions.models import (
    HorizonPredictionResponse,
    PredictionRequest,
    PredictionResponse,
)

__all__ = [
    "HorizonPredictionResponse",
    "PredictionRequest",
    "PredictionResponse",
    "router",
]
