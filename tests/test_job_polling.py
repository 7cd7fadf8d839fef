"""Tests for client-side job polling."""

import pytest

from sentiment_api.core.sentiment_jobs import JobPoller, SentimentJobOrchestrator
from sentiment_api.domain.entities import JobStatus, SentimentJob
from sentiment_api.domain.exceptions import JobFailedError, PollTimeoutError

JOB_ID = "AAPL_2025-01-01_2025-01-31"


def job(status: JobStatus, error: str | None = None) -> SentimentJob:
    return SentimentJob(
        job_id=JOB_ID,
        status=status,
        ticker="AAPL",
        start_date="2025-01-01",
        end_date="2025-01-31",
        started_at=0,
        error=error,
    )


class ScriptedStatus:
    """Returns the scripted statuses in order, repeating the last one."""

    def __init__(self, *statuses):
        self.statuses = list(statuses)
        self.calls = 0

    async def __call__(self, job_id):
        self.calls += 1
        index = min(self.calls, len(self.statuses)) - 1
        return self.statuses[index]


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.mark.asyncio
async def test_polls_until_completed():
    status = ScriptedStatus(
        job(JobStatus.PENDING), job(JobStatus.IN_PROGRESS), job(JobStatus.COMPLETED)
    )
    sleep = RecordingSleep()
    updates = []
    poller = JobPoller(status, interval=2.0, sleep=sleep, on_update=updates.append)

    result = await poller.wait_for(JOB_ID)

    assert result.status == JobStatus.COMPLETED
    assert poller.attempts == 3
    assert sleep.delays == [2.0, 2.0]
    assert [u.status for u in updates] == [
        JobStatus.PENDING,
        JobStatus.IN_PROGRESS,
        JobStatus.COMPLETED,
    ]


@pytest.mark.asyncio
async def test_unknown_job_keeps_polling_until_it_appears():
    status = ScriptedStatus(None, job(JobStatus.COMPLETED))
    poller = JobPoller(status, sleep=RecordingSleep())

    result = await poller.wait_for(JOB_ID)

    assert result.status == JobStatus.COMPLETED
    assert status.calls == 2


@pytest.mark.asyncio
async def test_failed_job_returned_or_raised():
    failed = job(JobStatus.FAILED, error="analyzer unavailable")

    result = await JobPoller(ScriptedStatus(failed), sleep=RecordingSleep()).wait_for(JOB_ID)
    assert result.error == "analyzer unavailable"

    poller = JobPoller(ScriptedStatus(failed), sleep=RecordingSleep())
    with pytest.raises(JobFailedError, match="analyzer unavailable"):
        await poller.wait_for(JOB_ID, raise_on_failure=True)


@pytest.mark.asyncio
async def test_times_out_after_max_attempts():
    status = ScriptedStatus(job(JobStatus.IN_PROGRESS))
    sleep = RecordingSleep()
    poller = JobPoller(status, interval=2.0, max_attempts=60, sleep=sleep)

    with pytest.raises(PollTimeoutError) as exc_info:
        await poller.wait_for(JOB_ID)

    assert exc_info.value.attempts == 60
    assert status.calls == 60
    assert len(sleep.delays) == 59
    assert "120s" in str(exc_info.value)


@pytest.mark.asyncio
async def test_cancel_stops_further_polls():
    status = ScriptedStatus(job(JobStatus.PENDING))

    def cancel_on_second_poll(_job):
        if status.calls == 2:
            poller.cancel()

    poller = JobPoller(status, sleep=RecordingSleep(), on_update=cancel_on_second_poll)

    result = await poller.wait_for(JOB_ID)

    assert result is None
    assert poller.cancelled
    assert status.calls == 2


@pytest.mark.asyncio
async def test_cancel_during_sleep():
    status = ScriptedStatus(job(JobStatus.PENDING))

    async def cancelling_sleep(seconds):
        poller.cancel()

    poller = JobPoller(status, sleep=cancelling_sleep)

    assert await poller.wait_for(JOB_ID) is None
    assert status.calls == 1


def test_rejects_non_positive_attempts():
    with pytest.raises(ValueError):
        JobPoller(ScriptedStatus(None), max_attempts=0)


@pytest.mark.asyncio
async def test_polls_real_orchestrator(store, aapl_articles):
    await store.news.batch_put_articles(aapl_articles)
    orchestrator = SentimentJobOrchestrator(store)
    submitted = await orchestrator.submit("AAPL", "2025-01-01", "2025-01-31")

    async def run_then_sleep(seconds):
        await orchestrator.run_job(submitted.job)

    poller = JobPoller(orchestrator.get_status, sleep=run_then_sleep)
    result = await poller.wait_for(submitted.job_id)

    assert result.status == JobStatus.COMPLETED
    assert result.articles_processed == 3
    assert poller.attempts == 2
