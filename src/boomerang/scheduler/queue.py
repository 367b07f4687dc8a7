"""In-process delay queue backed by APScheduler.

Each job is a one-shot ``DateTrigger`` whose APScheduler id is the job key,
so enqueueing an existing key replaces the old job and at most one live job
exists per key. Due jobs are dispatched to the registered handler through a
bounded semaphore. A handler that raises is re-enqueued under the same key
with exponential backoff until ``max_attempts`` is reached; after that the
key is remembered as exhausted for the life of the queue.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

JobHandler = Callable[[dict], Awaitable[None]]


class DelayQueue:
    def __init__(
        self,
        scheduler: AsyncIOScheduler | None = None,
        concurrency: int = 5,
        max_attempts: int = 3,
        backoff_seconds: float = 2.0,
    ) -> None:
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)
        self._semaphore = asyncio.Semaphore(concurrency)
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds
        self._handler: JobHandler | None = None
        self._exhausted: set[str] = set()

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    def register(self, handler: JobHandler) -> None:
        self._handler = handler

    def backoff_for(self, attempt: int) -> float:
        return self._backoff_seconds * 2 ** (attempt - 1)

    async def enqueue(
        self,
        job_key: str,
        payload: dict,
        delay: timedelta | float = 0,
        attempt: int = 1,
    ) -> str:
        seconds = delay.total_seconds() if isinstance(delay, timedelta) else float(delay)
        run_at = datetime.now(timezone.utc) + timedelta(seconds=max(0.0, seconds))
        if not self._scheduler.running:
            # replace_existing only applies once jobs reach the job store
            await self.cancel_by_key(job_key)
        job = self._scheduler.add_job(
            self.dispatch,
            trigger=DateTrigger(run_date=run_at),
            args=[job_key, payload, attempt],
            id=job_key,
            name=job_key,
            replace_existing=True,
            misfire_grace_time=None,
            max_instances=1,
        )
        logger.debug("Enqueued {} (attempt {}) for {}", job_key, attempt, run_at)
        return job.id

    async def cancel_by_key(self, job_key: str) -> bool:
        try:
            self._scheduler.remove_job(job_key)
        except JobLookupError:
            return False
        logger.debug("Removed job {}", job_key)
        return True

    def has_job(self, job_key: str) -> bool:
        return self._scheduler.get_job(job_key) is not None

    def is_exhausted(self, job_key: str) -> bool:
        """True once a job under ``job_key`` has failed ``max_attempts`` times."""
        return job_key in self._exhausted

    def add_interval_job(
        self, func: Callable[[], Awaitable[object]], seconds: float, job_id: str
    ) -> str:
        job = self._scheduler.add_job(
            func,
            trigger=IntervalTrigger(seconds=seconds),
            id=job_id,
            name=job_id,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        return job.id

    async def dispatch(self, job_key: str, payload: dict, attempt: int = 1) -> bool:
        """Run the handler for one due job. Returns True when it succeeded."""
        if self._handler is None:
            raise RuntimeError("DelayQueue has no registered handler")

        async with self._semaphore:
            try:
                await self._handler(payload)
            except Exception as exc:
                if attempt >= self._max_attempts:
                    self._exhausted.add(job_key)
                    logger.error(
                        "Job {} failed after {} attempt(s): {}", job_key, attempt, exc
                    )
                    return False
                delay = self.backoff_for(attempt)
                logger.warning(
                    "Job {} failed (attempt {}/{}), retrying in {}s: {}",
                    job_key,
                    attempt,
                    self._max_attempts,
                    delay,
                    exc,
                )
                await self.enqueue(job_key, payload, delay=delay, attempt=attempt + 1)
                return False

        logger.info("Job {} completed", job_key)
        return True

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()

    def shutdown(self, wait: bool = False) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
