"""User and message records kept by the assistant."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class MessageDirection(str, enum.Enum):
    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"


class User(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    phone_number: str
    consent_given: bool = False
    consent_date: datetime | None = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class Message(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    content: str
    direction: MessageDirection
    provider_message_id: str | None = None
    thread_id: str | None = None
    intent: str | None = None
    intent_data: str | None = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    expires_at: datetime | None = None
