"""Sentiment job orchestration.

Drives one (ticker, start_date, end_date) analysis through its lifecycle:

    PENDING -> IN_PROGRESS -> COMPLETED | FAILED

Job ids are deterministic, so re-triggering the same range returns the
existing job instead of redoing the work.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Sequence

from sentiment_api.core.sentiment import AnalysisRequest, SentimentAnalyzer, SentimentResult
from sentiment_api.core.sentiment.protocols import SentimentScorer
from sentiment_api.core.sentiment_jobs.models import PipelineOutcome, ResultsView, TriggerResult
from sentiment_api.core.utils import (
    gather_bounded,
    generate_job_id,
    normalize_ticker,
    now_ms,
    settle_all,
    validate_date,
    validate_date_range,
)
from sentiment_api.domain.constants import DEFAULT_MAX_CONCURRENCY
from sentiment_api.domain.entities import Article, JobStatus, SentimentJob, SentimentRecord
from sentiment_api.domain.exceptions import AnalysisFailure, JobFailedError
from sentiment_api.domain.services import (
    aggregate_daily_sentiment,
    filter_articles_by_date_range,
)
from sentiment_api.storage.handle import StoreHandle

logger = logging.getLogger(__name__)

# Batch analysis is attempted this many times before per-article fallback
BATCH_ATTEMPTS = 2


class SentimentJobOrchestrator:
    """Runs sentiment jobs against the cache store.

    Args:
        store: Handle over the news, sentiment and jobs tables
        analyzer: Scorer used for batch and per-article analysis
        max_concurrency: Cap on concurrent existence checks
    """

    def __init__(
        self,
        store: StoreHandle,
        analyzer: SentimentScorer | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        self.store = store
        self.analyzer = analyzer or SentimentAnalyzer()
        self.max_concurrency = max_concurrency

    # ========================================================================
    # Job lifecycle
    # ========================================================================

    async def trigger(self, ticker: str, start_date: str, end_date: str) -> TriggerResult:
        """Create and run a job, or return the existing one.

        Raises:
            InvalidArgumentError: Malformed ticker or date range (nothing written)
            JobFailedError: The pipeline failed; the job is recorded as FAILED
        """
        submitted = await self.submit(ticker, start_date, end_date)
        if submitted.cached:
            return submitted
        return await self.run_job(submitted.job)

    async def submit(self, ticker: str, start_date: str, end_date: str) -> TriggerResult:
        """Create a PENDING job without running it.

        An existing job with the same id (any status) is returned with
        cached=True.
        """
        ticker = normalize_ticker(ticker)
        validate_date_range(start_date, end_date)
        job_id = generate_job_id(ticker, start_date, end_date)

        existing = await self.store.jobs.get_job(job_id)
        if existing is not None:
            logger.info(f"Job {job_id} already exists with status {existing.status.value}")
            return TriggerResult(job=existing, cached=True)

        job = SentimentJob(
            job_id=job_id,
            status=JobStatus.PENDING,
            ticker=ticker,
            start_date=start_date,
            end_date=end_date,
            started_at=now_ms(),
        )
        if not await self.store.jobs.create_job(job):
            # Another caller created it between our read and write
            current = await self.store.jobs.get_job(job_id)
            return TriggerResult(job=current or job, cached=True)

        logger.info(f"Created job {job_id}")
        return TriggerResult(job=job, cached=False)

    async def run_job(self, job: SentimentJob) -> TriggerResult:
        """Execute the pipeline for a submitted job.

        On failure the job is marked FAILED with the error message before
        JobFailedError is raised, so pollers and the caller agree. This
        covers the status transitions as well as the pipeline itself.
        """
        try:
            await self.store.jobs.mark_in_progress(job.job_id)
            logger.info(f"Processing job {job.job_id}")
            outcome = await self.process(job.ticker, job.start_date, job.end_date)
            completed = await self.store.jobs.mark_completed(
                job.job_id, outcome.articles_processed, outcome.articles_skipped
            )
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(f"Job {job.job_id} failed: {message}")
            await self.store.jobs.mark_failed(job.job_id, message)
            raise JobFailedError(message, job_id=job.job_id) from e

        logger.info(
            f"Job {job.job_id} completed: {outcome.articles_processed} analyzed, "
            f"{outcome.articles_skipped} cached, {outcome.articles_failed} failed"
        )
        return TriggerResult(
            job=completed or job,
            cached=False,
            daily_sentiment=outcome.daily_sentiment,
        )

    async def get_status(self, job_id: str) -> SentimentJob | None:
        """Current job record, or None if unknown or expired."""
        return await self.store.jobs.get_job(job_id)

    async def reset(self, job_id: str) -> bool:
        """Delete a job record so the range can be triggered again.

        Returns:
            False if no such job exists
        """
        if await self.store.jobs.get_job(job_id) is None:
            return False
        await self.store.jobs.delete_job(job_id)
        logger.info(f"Reset job {job_id}")
        return True

    async def get_results(
        self,
        ticker: str,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> ResultsView:
        """Daily sentiment straight from the cache, independent of job records."""
        ticker = normalize_ticker(ticker)
        if start_date is not None:
            validate_date(start_date, "start_date")
        if end_date is not None:
            validate_date(end_date, "end_date")

        records = await self.store.sentiment.query_by_ticker(ticker)
        if not records:
            return ResultsView(ticker, start_date, end_date, [], cached=False)

        articles = filter_articles_by_date_range(
            await self.store.news.query_by_ticker(ticker), start_date, end_date
        )
        return ResultsView(
            ticker,
            start_date,
            end_date,
            aggregate_daily_sentiment(records, articles),
            cached=True,
        )

    # ========================================================================
    # Pipeline
    # ========================================================================

    async def process(self, ticker: str, start_date: str, end_date: str) -> PipelineOutcome:
        """Analyze uncached articles in the range and aggregate daily sentiment."""
        articles = await self.store.news.query_by_date_range(ticker, start_date, end_date)
        if not articles:
            logger.info(f"No cached articles for {ticker} in {start_date}..{end_date}")
            return PipelineOutcome(0, 0, 0, [])

        to_analyze, cached = await self.partition_by_cache(ticker, articles)
        records = await self.analyze_articles(ticker, to_analyze)

        if records:
            await self.store.sentiment.batch_put_sentiments(records)

        all_records = await self.store.sentiment.query_by_ticker(ticker)
        return PipelineOutcome(
            articles_processed=len(to_analyze),
            articles_skipped=len(cached),
            articles_failed=len(to_analyze) - len(records),
            daily_sentiment=aggregate_daily_sentiment(all_records, articles),
        )

    async def partition_by_cache(
        self, ticker: str, articles: Sequence[Article]
    ) -> tuple[list[Article], list[Article]]:
        """Split articles into (needs analysis, already has sentiment)."""
        flags = await gather_bounded(
            articles,
            lambda article: self.store.sentiment.exists(ticker, article.article_hash),
            self.max_concurrency,
        )
        to_analyze = [a for a, exists in zip(articles, flags, strict=True) if not exists]
        cached = [a for a, exists in zip(articles, flags, strict=True) if exists]
        return to_analyze, cached

    async def analyze_articles(
        self, ticker: str, articles: Sequence[Article]
    ) -> list[SentimentRecord]:
        """Analyze articles: batch, batch again, then one by one.

        Articles whose individual analysis fails are logged and dropped.
        """
        if not articles:
            return []

        requests = [AnalysisRequest(article_hash=a.article_hash, text=a.text) for a in articles]

        results: list[SentimentResult] | None = None
        for attempt in range(1, BATCH_ATTEMPTS + 1):
            try:
                results = await self._analyze_batch(requests)
                break
            except Exception as e:
                logger.warning(
                    f"Batch analysis attempt {attempt}/{BATCH_ATTEMPTS} failed for "
                    f"{ticker} ({len(requests)} articles): {e}"
                )

        if results is None:
            results = await self._analyze_individually(ticker, requests)

        analyzed_at = now_ms()
        return [result.to_record(ticker, analyzed_at) for result in results]

    async def _analyze_batch(self, requests: list[AnalysisRequest]) -> list[SentimentResult]:
        results = self.analyzer.analyze_batch(requests)
        if inspect.isawaitable(results):
            results = await results
        return list(results)

    async def _analyze_one(self, request: AnalysisRequest) -> SentimentResult:
        try:
            result = self.analyzer.analyze(request.text, request.article_hash)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise AnalysisFailure(str(e), article_hash=request.article_hash) from e
        return result

    async def _analyze_individually(
        self, ticker: str, requests: list[AnalysisRequest]
    ) -> list[SentimentResult]:
        outcomes = await settle_all((r.article_hash, self._analyze_one(r)) for r in requests)

        results = []
        for outcome in outcomes:
            if outcome.ok:
                results.append(outcome.value)
            else:
                logger.warning(f"Dropping article {ticker}/{outcome.key}: {outcome.error}")

        logger.info(
            f"Per-article fallback for {ticker}: {len(results)}/{len(requests)} succeeded"
        )
        return results
