"""Request and response models for prediction endpoints."""

from pydantic import BaseModel, Field

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class PredictionRequest(BaseModel):
    """Request model for direction predictions."""

    ticker: str = Field(..., min_length=1, max_length=10, description="Stock ticker")
    start_date: str | None = Field(
        None,
        pattern=DATE_PATTERN,
        description="Data window start (YYYY-MM-DD). Defaults to PREDICTION_LOOKBACK_MONTHS before end_date.",
    )
    end_date: str | None = Field(
        None,
        pattern=DATE_PATTERN,
        description="Data window end (YYYY-MM-DD). Defaults to today.",
    )


class CVResultsResponse(BaseModel):
    """Cross-validation diagnostics."""

    scores: list[float]
    mean_score: float
    std_score: float


class HorizonPredictionResponse(BaseModel):
    """Prediction for one horizon. prediction 0 = up, 1 = down."""

    horizon: str
    days: int
    prediction: int
    probability_down: float
    cv: CVResultsResponse
    n_samples: int


class PredictionResponse(BaseModel):
    """Per-horizon predictions for a ticker."""

    ticker: str
    start_date: str
    end_date: str
    as_of: str
    n_data_points: int
    predictions: dict[str, HorizonPredictionResponse]
    duration_ms: float
