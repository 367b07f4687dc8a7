"""Delivery handler invoked by the delay queue when a reminder is due."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from loguru import logger

from boomerang.exceptions import DeliveryError
from boomerang.models.message import Message, MessageDirection
from boomerang.models.reminder import ReminderJob, ReminderStatus
from boomerang.scheduler.lifecycle import ReminderLifecycleManager, utc_now
from boomerang.storage.store import ReminderStore
from boomerang.transport.base import Transport

QUICK_ACTIONS = ("SNOOZE 10m", "SNOOZE 30m", "DONE")


def compose_reminder_body(subject: str, original_text: str | None = None) -> str:
    body = f"🔔 Reminder: {subject}"
    if original_text:
        body += f'\n\nOriginal: "{original_text}"'
    body += "\n\nQuick actions:\n" + "\n".join(f"• {action}" for action in QUICK_ACTIONS)
    return body


class DeliveryHandler:
    def __init__(
        self,
        store: ReminderStore,
        transport: Transport,
        lifecycle: ReminderLifecycleManager,
        retention: timedelta | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._transport = transport
        self._lifecycle = lifecycle
        self._retention = retention
        self._clock = clock

    async def __call__(self, payload: dict) -> None:
        job = ReminderJob.model_validate(payload)

        # Re-check: the reminder may have been cancelled or snoozed after the
        # job was scheduled.
        reminder = await self._store.get_reminder(job.reminder_id)
        if reminder is None or reminder.status != ReminderStatus.PENDING:
            logger.info("Reminder {} no longer pending, skipping", job.reminder_id)
            return

        body = compose_reminder_body(reminder.subject, reminder.original_text)
        result = await self._transport.send(job.destination, body)
        if not result.ok:
            raise DeliveryError(
                f"Failed to send reminder: {result.error}", reminder_id=reminder.id
            )

        if not await self._lifecycle.mark_delivered(reminder.id):
            logger.warning(
                "Reminder {} left PENDING while it was being sent", reminder.id
            )
            return

        if reminder.is_recurring:
            await self._lifecycle.schedule_next_recurrence(reminder.id)

        now = self._clock()
        await self._store.log_message(
            Message(
                user_id=reminder.user_id,
                content=body,
                direction=MessageDirection.OUTBOUND,
                provider_message_id=result.provider_message_id,
                expires_at=now + self._retention if self._retention else None,
            )
        )
