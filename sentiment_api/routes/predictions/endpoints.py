"""Prediction route handlers."""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException

from sentiment_api.core.config import resolve_prediction_window
from sentiment_api.core.prediction import predict_from_cache
from sentiment_api.core.utils import validate_date, validate_date_range
from sentiment_api.domain.exceptions import (
    InsufficientDataError,
    InvalidArgumentError,
    StoreError,
    TransientStoreError,
)
from sentiment_api.routes.dependencies import get_store_handle
from sentiment_api.routes.predictions.models import PredictionRequest, PredictionResponse
from sentiment_api.storage import StoreHandle

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", response_model=PredictionResponse)
async def predict(
    request: PredictionRequest,
    store: Annotated[StoreHandle, Depends(get_store_handle)],
) -> PredictionResponse:
    """Predict price direction for the next day, two weeks and one month.

    Uses cached daily prices and cached article sentiment within the data
    window. Each horizon trains its own cross-validated model; the response
    includes the CV diagnostics.
    """
    try:
        end = None
        if request.end_date:
            end = date.fromisoformat(validate_date(request.end_date, "end_date"))
        default_start, default_end = resolve_prediction_window(end)
        start_date = request.start_date or default_start.isoformat()
        end_date = request.end_date or default_end.isoformat()
        validate_date_range(start_date, end_date)
        output = await predict_from_cache(store, request.ticker, start_date, end_date)
    except InsufficientDataError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except StoreError as e:
        status = 503 if isinstance(e, TransientStoreError) else 500
        raise HTTPException(status_code=status, detail=f"Cache store error: {e}") from e

    return PredictionResponse(start_date=start_date, end_date=end_date, **output.to_dict())
