"""Sentiment route handlers."""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response

from sentiment_api.core.sentiment_jobs import SentimentJobOrchestrator
from sentiment_api.domain.entities import SentimentJob
from sentiment_api.domain.exceptions import (
    InvalidArgumentError,
    JobFailedError,
    StoreError,
    TransientStoreError,
)
from sentiment_api.routes.sentiment.dependencies import get_orchestrator
from sentiment_api.routes.sentiment.models import (
    SentimentJobRequest,
    SentimentJobResponse,
    SentimentResultsResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _store_error_to_http(e: StoreError) -> HTTPException:
    status = 503 if isinstance(e, TransientStoreError) else 500
    return HTTPException(status_code=status, detail=f"Cache store error: {e}")


async def _run_job_in_background(orchestrator: SentimentJobOrchestrator, job: SentimentJob) -> None:
    """Run a submitted job. Pipeline failures are recorded on the job record."""
    try:
        await orchestrator.run_job(job)
    except JobFailedError as e:
        logger.error(f"Background job {e.job_id} failed: {e}")
    except StoreError as e:
        # Recording the failure itself failed; the job expires with its TTL
        logger.error(f"Background job {job.job_id} could not be marked failed: {e}")


# ============================================================================
# Job endpoints
# ============================================================================


@router.post("", response_model=SentimentJobResponse)
async def trigger_sentiment_job(
    request: SentimentJobRequest,
    background_tasks: BackgroundTasks,
    response: Response,
    orchestrator: Annotated[SentimentJobOrchestrator, Depends(get_orchestrator)],
) -> SentimentJobResponse:
    """Trigger sentiment analysis for a ticker and date range.

    The job id is deterministic ({TICKER}_{start}_{end}). If a job already
    exists for the range its current state is returned with cached=true.

    With wait=true (default) the job runs within the request. With
    wait=false it is scheduled in the background, the PENDING job is
    returned with status 202, and GET /sentiment/jobs/{job_id} reports
    progress.
    """
    try:
        if request.wait:
            result = await orchestrator.trigger(request.ticker, request.start_date, request.end_date)
        else:
            result = await orchestrator.submit(request.ticker, request.start_date, request.end_date)
            if not result.cached:
                background_tasks.add_task(_run_job_in_background, orchestrator, result.job)
                response.status_code = 202
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except JobFailedError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    except StoreError as e:
        raise _store_error_to_http(e) from e

    return SentimentJobResponse.from_dict(result.to_dict())


@router.get("/jobs/{job_id}", response_model=SentimentJobResponse)
async def get_sentiment_job_status(
    job_id: str,
    orchestrator: Annotated[SentimentJobOrchestrator, Depends(get_orchestrator)],
) -> SentimentJobResponse:
    """Get the status of a sentiment job.

    Failed jobs stay queryable until their record expires.
    """
    try:
        job = await orchestrator.get_status(job_id)
    except StoreError as e:
        raise _store_error_to_http(e) from e
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job not found: {job_id}")
    return SentimentJobResponse.from_dict(job.to_dict())


@router.delete("/jobs/{job_id}", status_code=204)
async def reset_sentiment_job(
    job_id: str,
    orchestrator: Annotated[SentimentJobOrchestrator, Depends(get_orchestrator)],
) -> Response:
    """Delete a job record so the same range can be triggered again."""
    try:
        deleted = await orchestrator.reset(job_id)
    except StoreError as e:
        raise _store_error_to_http(e) from e
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Job not found: {job_id}")
    return Response(status_code=204)


# ============================================================================
# Results endpoint
# ============================================================================


@router.get("", response_model=SentimentResultsResponse)
async def get_sentiment_results(
    orchestrator: Annotated[SentimentJobOrchestrator, Depends(get_orchestrator)],
    ticker: Annotated[str, Query(min_length=1, description="Stock ticker")],
    start_date: Annotated[str | None, Query(description="Range start (YYYY-MM-DD)")] = None,
    end_date: Annotated[str | None, Query(description="Range end (YYYY-MM-DD)")] = None,
) -> SentimentResultsResponse:
    """Get daily sentiment for a ticker straight from the cache.

    Works even when the job that produced the data has expired.
    """
    try:
        view = await orchestrator.get_results(ticker, start_date, end_date)
    except InvalidArgumentError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except StoreError as e:
        raise _store_error_to_http(e) from e
    return SentimentResultsResponse(**view.to_dict())
