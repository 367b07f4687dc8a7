"""Reminder lifecycle: create, cancel, snooze, deliver and recur.

Status transitions are conditional updates scoped to PENDING, so when a
cancel races a delivery only one of them changes the row. Terminal rows
are never reopened; snoozing and recurrence create new reminders.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta
from loguru import logger

from boomerang.models.reminder import (
    RecurrenceType,
    Reminder,
    ReminderJob,
    ReminderStatus,
    job_key,
)
from boomerang.scheduler.queue import DelayQueue
from boomerang.storage.store import ReminderStore

_RECURRENCE_STEP = {
    RecurrenceType.DAILY: relativedelta(days=1),
    RecurrenceType.WEEKLY: relativedelta(weeks=1),
    RecurrenceType.MONTHLY: relativedelta(months=1),
}


def next_occurrence(previous: datetime, recurrence: RecurrenceType) -> datetime:
    return previous + _RECURRENCE_STEP[recurrence]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReminderLifecycleManager:
    def __init__(
        self,
        store: ReminderStore,
        queue: DelayQueue,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._queue = queue
        self._clock = clock

    async def create(
        self,
        user_id: str,
        destination: str,
        subject: str,
        scheduled_for: datetime,
        original_text: str | None = None,
        recurrence: RecurrenceType | None = None,
        recurrence_end: datetime | None = None,
    ) -> str:
        reminder = Reminder(
            user_id=user_id,
            subject=subject,
            scheduled_for=scheduled_for,
            is_recurring=recurrence is not None,
            recurrence_type=recurrence,
            recurrence_end=recurrence_end,
            original_text=original_text,
        )
        # The row must exist before the job so an early firing can find it.
        await self._store.create_reminder(reminder)
        await self._enqueue(reminder, destination)
        logger.info(
            "Created reminder {} for user {} at {}",
            reminder.id,
            user_id,
            scheduled_for.isoformat(),
        )
        return reminder.id

    async def cancel(self, reminder_id: str, user_id: str) -> bool:
        cancelled = await self._store.update_reminder_status(
            reminder_id,
            ReminderStatus.CANCELLED,
            self._clock(),
            user_id=user_id,
        )
        if not cancelled:
            return False
        await self._queue.cancel_by_key(job_key(reminder_id))
        logger.info("Cancelled reminder {}", reminder_id)
        return True

    async def snooze(self, reminder_id: str, user_id: str, minutes: int) -> str | None:
        if minutes <= 0:
            raise ValueError("Snooze minutes must be positive")

        source = await self._store.get_reminder(reminder_id)
        if source is None or source.user_id != user_id or source.is_terminal:
            return None
        user = await self._store.get_user(user_id)
        if user is None:
            return None

        if not await self.cancel(reminder_id, user_id):
            return None

        new_id = await self.create(
            user_id,
            user.phone_number,
            source.subject,
            self._clock() + timedelta(minutes=minutes),
            original_text=source.original_text,
            recurrence=source.recurrence_type,
            recurrence_end=source.recurrence_end,
        )
        logger.info("Snoozed reminder {} by {} min as {}", reminder_id, minutes, new_id)
        return new_id

    async def mark_delivered(self, reminder_id: str) -> bool:
        delivered = await self._store.update_reminder_status(
            reminder_id, ReminderStatus.DELIVERED, self._clock()
        )
        if delivered:
            logger.info("Delivered reminder {}", reminder_id)
        return delivered

    async def schedule_next_recurrence(self, reminder_id: str) -> str | None:
        reminder = await self._store.get_reminder(reminder_id)
        if reminder is None or not reminder.is_recurring or reminder.recurrence_type is None:
            return None

        if reminder.recurrence_end is not None and reminder.recurrence_end <= self._clock():
            logger.info("Recurrence for reminder {} has ended", reminder_id)
            return None

        user = await self._store.get_user(reminder.user_id)
        if user is None:
            logger.warning("Owner of reminder {} is gone, not recurring", reminder_id)
            return None

        # Step from the previous slot, not from now, so late deliveries keep cadence.
        return await self.create(
            reminder.user_id,
            user.phone_number,
            reminder.subject,
            next_occurrence(reminder.scheduled_for, reminder.recurrence_type),
            original_text=reminder.original_text,
            recurrence=reminder.recurrence_type,
            recurrence_end=reminder.recurrence_end,
        )

    async def cancel_matching(self, user_id: str, subject: str) -> int:
        """Cancel every pending reminder of ``user_id`` whose subject contains ``subject``."""
        matches = await self._store.find_pending_reminders(
            user_id=user_id, subject_contains=subject
        )
        count = 0
        for reminder in matches:
            if await self.cancel(reminder.id, user_id):
                count += 1
        return count

    async def snooze_latest(self, user_id: str, minutes: int) -> str | None:
        latest = await self._store.find_pending_reminders(user_id=user_id, limit=1)
        if not latest:
            return None
        return await self.snooze(latest[0].id, user_id, minutes)

    async def reschedule_pending(self) -> int:
        """Enqueue jobs for pending reminders the queue does not know about.

        Reminders whose job already used up its attempts are left alone.
        """
        pending = await self._store.find_pending_reminders()
        phones: dict[str, str | None] = {}
        added = 0
        for reminder in pending:
            key = job_key(reminder.id)
            if self._queue.has_job(key) or self._queue.is_exhausted(key):
                continue
            if reminder.user_id not in phones:
                user = await self._store.get_user(reminder.user_id)
                phones[reminder.user_id] = user.phone_number if user else None
            destination = phones[reminder.user_id]
            if destination is None:
                continue
            await self._enqueue(reminder, destination)
            added += 1
        if added:
            logger.info("Scheduled {} pending reminder(s) from the store", added)
        return added

    async def _enqueue(self, reminder: Reminder, destination: str) -> None:
        job = ReminderJob(
            reminder_id=reminder.id,
            user_id=reminder.user_id,
            destination=destination,
            subject=reminder.subject,
            original_text=reminder.original_text,
            is_recurring=reminder.is_recurring,
            recurrence_type=reminder.recurrence_type,
        )
        delay = max(timedelta(0), reminder.scheduled_for - self._clock())
        await self._queue.enqueue(
            job_key(reminder.id), job.model_dump(mode="json"), delay=delay
        )
