"""Client-side job status polling."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from sentiment_api.domain.constants import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_POLL_MAX_ATTEMPTS,
)
from sentiment_api.domain.entities import JobStatus, SentimentJob
from sentiment_api.domain.exceptions import JobFailedError, PollTimeoutError

logger = logging.getLogger(__name__)


class JobPoller:
    """Polls a job's status until it reaches a terminal state.

    Cancelling only stops future polls. A status call already in flight is
    allowed to finish, and the job itself is never affected.
    """

    def __init__(
        self,
        get_status: Callable[[str], Awaitable[SentimentJob | None]],
        interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        max_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_update: Callable[[SentimentJob], None] | None = None,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._get_status = get_status
        self.interval = interval
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._on_update = on_update
        self._attempts = 0
        self._cancelled = False

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop scheduling further polls."""
        self._cancelled = True

    async def wait_for(self, job_id: str, raise_on_failure: bool = False) -> SentimentJob | None:
        """Poll until the job is COMPLETED or FAILED.

        Args:
            job_id: Job to watch
            raise_on_failure: Raise JobFailedError instead of returning a FAILED job

        Returns:
            The terminal job, or None if polling was cancelled first

        Raises:
            PollTimeoutError: max_attempts polls without a terminal status
        """
        self._attempts = 0
        self._cancelled = False

        while True:
            self._attempts += 1
            job = await self._get_status(job_id)

            if job is not None:
                if self._on_update is not None:
                    self._on_update(job)
                if job.status.is_terminal:
                    logger.info(f"Job {job_id} finished with {job.status.value}")
                    if raise_on_failure and job.status == JobStatus.FAILED:
                        raise JobFailedError(job.error or "Sentiment analysis failed", job_id)
                    return job

            if self._attempts >= self.max_attempts:
                raise PollTimeoutError(
                    f"Job {job_id} timed out after {self._attempts} attempts "
                    f"({self._attempts * self.interval:g}s)",
                    job_id=job_id,
                    attempts=self._attempts,
                )

            if self._cancelled:
                logger.info(f"Polling for {job_id} cancelled after {self._attempts} attempts")
                return None

            await self._sleep(self.interval)

            if self._cancelled:
                logger.info(f"Polling for {job_id} cancelled after {self._attempts} attempts")
                return None
