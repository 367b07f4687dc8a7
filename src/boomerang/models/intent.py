"""Intent models: output of the parsing cascade."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from pydantic.alias_generators import to_camel

from boomerang.models.reminder import RecurrenceType


class IntentType(str, enum.Enum):
    REMINDER = "REMINDER"
    SNOOZE = "SNOOZE"
    CANCEL = "CANCEL"
    SUMMARIZE = "SUMMARIZE"
    OPT_IN = "OPT_IN"
    OPT_OUT = "OPT_OUT"
    QUICK_REPLY = "QUICK_REPLY"
    ASK = "ASK"
    UNKNOWN = "UNKNOWN"


class IntentSource(str, enum.Enum):
    RULES = "rules"
    LLM = "llm"
    FALLBACK = "fallback"


class IntentData(BaseModel):
    """Slots extracted for an intent. Accepts camelCase keys from LLM replies."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    subject: str | None = None
    scheduled_for: datetime | None = None
    snooze_minutes: PositiveInt | None = None
    recurrence: RecurrenceType | None = None
    recurrence_end: datetime | None = None
    query: str | None = None


class ParseContext(BaseModel):
    user_id: str | None = None
    thread_id: str | None = None


class ParsedIntent(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    raw_text: str = ""
    intent_type: IntentType
    confidence: float = Field(ge=0.0, le=1.0)
    data: IntentData = Field(default_factory=IntentData)
    source: IntentSource = IntentSource.RULES
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @classmethod
    def unknown(
        cls, raw_text: str = "", source: IntentSource = IntentSource.FALLBACK
    ) -> ParsedIntent:
        return cls(
            raw_text=raw_text,
            intent_type=IntentType.UNKNOWN,
            confidence=0.1,
            source=source,
        )
