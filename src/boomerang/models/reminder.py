"""Reminder models: rows owned by the lifecycle manager and their job payload."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field

JOB_KEY_PREFIX = "reminder-"


class ReminderStatus(str, enum.Enum):
    PENDING = "PENDING"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class RecurrenceType(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class Reminder(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    subject: str = Field(min_length=1)
    scheduled_for: datetime
    status: ReminderStatus = ReminderStatus.PENDING
    is_recurring: bool = False
    recurrence_type: RecurrenceType | None = None
    recurrence_end: datetime | None = None
    original_text: str | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def is_terminal(self) -> bool:
        return self.status != ReminderStatus.PENDING


class ReminderJob(BaseModel):
    """Everything the delivery handler needs without extra lookups."""

    reminder_id: str
    user_id: str
    destination: str
    subject: str
    original_text: str | None = None
    is_recurring: bool = False
    recurrence_type: RecurrenceType | None = None


def job_key(reminder_id: str) -> str:
    return f"{JOB_KEY_PREFIX}{reminder_id}"
