"""Rule-based intent matching.

Rules run in a fixed priority order and the first category whose pattern
matches wins. Overlapping phrasings are settled by that order: opt-in/out
words, then cancel, snooze, the explicit ``/remind`` directive, the
natural-language reminder templates, and finally summary requests.

Reminder templates are tried one after another until a template both
matches and resolves to a moment strictly after ``now``. A template that
matches but fails validation falls through to the next template, never to
the next category.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Callable, NamedTuple

from boomerang.models.intent import IntentData, IntentSource, IntentType, ParsedIntent
from boomerang.models.reminder import RecurrenceType

OPT_CONFIDENCE = 0.95
CANCEL_CONFIDENCE = 0.9
SNOOZE_CONFIDENCE = 0.9
EXPLICIT_REMINDER_CONFIDENCE = 0.95
TEMPLATE_REMINDER_CONFIDENCE = 0.85
GUESSED_REMINDER_CONFIDENCE = 0.6
SUMMARIZE_CONFIDENCE = 0.9

_OPT_IN_RE = re.compile(r"^(?:yes|yep|yeah|ok|okay|sure|i agree|accept)$", re.IGNORECASE)
_OPT_OUT_RE = re.compile(r"^(?:no|nope|stop|unsubscribe|cancel|opt.?out)$", re.IGNORECASE)

_CANCEL_RE = re.compile(
    r"(?:cancel|delete|remove|stop)\s+(?:my\s+)?(?:reminders?|remind)\s+"
    r"(?:(?:about|for|to)\s+)?(.+)",
    re.IGNORECASE,
)

_SNOOZE_RE = re.compile(
    r"(?:snooze|postpone|delay|remind\s+me\s+later)\s+(?:this\s+)?(?:for\s+)?"
    r"(\d+)\s*(hours?|hrs?|h|minutes?|mins?|m)\b",
    re.IGNORECASE,
)

_EXPLICIT_RE = re.compile(
    r"/remind\s+(\d{4}-\d{2}-\d{2})\s+(\d{2}):(\d{2})\s+(.+)",
    re.IGNORECASE,
)

_AT_TIME_RE = re.compile(
    r"remind\s+me\s+(tomorrow|today)\s+(?:at\s+)?(\d{1,2})(?::(\d{2}))?\s*(am|pm)?"
    r"\s+(?:to|about|for)\s+(.+)",
    re.IGNORECASE,
)

_OFFSET_RE = re.compile(
    r"(?:ping|remind|alert)\s+me\s+(?:in\s+)?(\d+)\s+(hours?|minutes?|days?|weeks?)"
    r"\s+(?:about|for|to|that)\s+(.+)",
    re.IGNORECASE,
)

_GUESS_RE = re.compile(
    r"remind\s+me\s+(?:to|about|for)\s+(.+?)\s+(?:tomorrow|today|in\s+\d+)",
    re.IGNORECASE,
)

_RECURRENCE_RE = re.compile(r"\b(daily|weekly|monthly)\b", re.IGNORECASE)

_SUMMARIZE_RE = re.compile(
    r"^(?:summarize|summarise|summary|tl;?dr|recap)"
    r"(?:\s+this)?(?:\s+(?:thread|chat|conversation))?[.!?]*$",
    re.IGNORECASE,
)


class Candidate(NamedTuple):
    subject: str
    scheduled_for: datetime


Extractor = Callable[[re.Match, datetime], Candidate]


def _at_time(match: re.Match[str], now: datetime) -> Candidate:
    day, hour_s, minute_s, meridiem, subject = match.groups()
    hour = int(hour_s)
    minute = int(minute_s) if minute_s else 0

    if meridiem:
        if not 1 <= hour <= 12:
            raise ValueError(f"hour {hour} is not a 12-hour clock value")
        meridiem = meridiem.lower()
        if meridiem == "pm" and hour != 12:
            hour += 12
        elif meridiem == "am" and hour == 12:
            hour = 0

    base = now + timedelta(days=1) if day.lower() == "tomorrow" else now
    # replace() raises ValueError for hour > 23 or minute > 59
    scheduled = base.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if scheduled <= now:
        scheduled += timedelta(days=1)
    return Candidate(subject.strip(), scheduled)


def _offset(match: re.Match[str], now: datetime) -> Candidate:
    amount_s, unit, subject = match.groups()
    amount = int(amount_s)
    unit = unit.lower()
    if unit.startswith("minute"):
        delta = timedelta(minutes=amount)
    elif unit.startswith("day"):
        delta = timedelta(days=amount)
    elif unit.startswith("week"):
        delta = timedelta(weeks=amount)
    else:
        delta = timedelta(hours=amount)
    return Candidate(subject.strip(), now + delta)


def _guess(match: re.Match[str], now: datetime) -> Candidate:
    # Subject only; the time is a placeholder one hour out.
    return Candidate(match.group(1).strip(), now + timedelta(hours=1))


class ReminderTemplate(NamedTuple):
    name: str
    pattern: re.Pattern[str]
    extract: Extractor
    confidence: float


REMINDER_TEMPLATES: tuple[ReminderTemplate, ...] = (
    ReminderTemplate("at_time", _AT_TIME_RE, _at_time, TEMPLATE_REMINDER_CONFIDENCE),
    ReminderTemplate("offset", _OFFSET_RE, _offset, TEMPLATE_REMINDER_CONFIDENCE),
    ReminderTemplate("guess", _GUESS_RE, _guess, GUESSED_REMINDER_CONFIDENCE),
)


def detect_recurrence(normalized: str) -> RecurrenceType | None:
    match = _RECURRENCE_RE.search(normalized)
    if match is None:
        return None
    return RecurrenceType(match.group(1).upper())


class RuleMatcher:
    """Deterministic, side-effect free first tier of the parser."""

    def match(
        self,
        normalized: str,
        original: str,
        now: datetime | None = None,
    ) -> ParsedIntent:
        now = now or datetime.now().astimezone()

        for rule in (
            self._match_opt,
            self._match_cancel,
            self._match_snooze,
            self._match_explicit,
            self._match_templates,
            self._match_summarize,
        ):
            result = rule(normalized, original, now)
            if result is not None:
                return result

        return ParsedIntent.unknown(original, source=IntentSource.RULES)

    def _match_opt(
        self, normalized: str, original: str, now: datetime
    ) -> ParsedIntent | None:
        if _OPT_IN_RE.match(normalized):
            return self._intent(original, IntentType.OPT_IN, OPT_CONFIDENCE)
        if _OPT_OUT_RE.match(normalized):
            return self._intent(original, IntentType.OPT_OUT, OPT_CONFIDENCE)
        return None

    def _match_cancel(
        self, normalized: str, original: str, now: datetime
    ) -> ParsedIntent | None:
        match = _CANCEL_RE.search(normalized)
        if match is None:
            return None
        subject = match.group(1).strip()
        if not subject:
            return None
        return self._intent(
            original, IntentType.CANCEL, CANCEL_CONFIDENCE, subject=subject
        )

    def _match_snooze(
        self, normalized: str, original: str, now: datetime
    ) -> ParsedIntent | None:
        match = _SNOOZE_RE.search(normalized)
        if match is None:
            return None
        amount = int(match.group(1))
        unit = match.group(2).lower()
        minutes = amount * 60 if unit.startswith("h") else amount
        if minutes <= 0:
            return None
        return self._intent(
            original, IntentType.SNOOZE, SNOOZE_CONFIDENCE, snooze_minutes=minutes
        )

    def _match_explicit(
        self, normalized: str, original: str, now: datetime
    ) -> ParsedIntent | None:
        match = _EXPLICIT_RE.search(original)
        if match is None:
            return None
        date_s, hour_s, minute_s, subject = match.groups()
        try:
            scheduled = datetime.strptime(
                f"{date_s} {hour_s}:{minute_s}", "%Y-%m-%d %H:%M"
            ).replace(tzinfo=now.tzinfo)
        except ValueError:
            return None
        subject = subject.strip()
        if not subject or scheduled <= now:
            return None
        return self._intent(
            original,
            IntentType.REMINDER,
            EXPLICIT_REMINDER_CONFIDENCE,
            subject=subject,
            scheduled_for=scheduled,
        )

    def _match_templates(
        self, normalized: str, original: str, now: datetime
    ) -> ParsedIntent | None:
        for template in REMINDER_TEMPLATES:
            match = template.pattern.search(original)
            if match is None:
                continue
            try:
                candidate = template.extract(match, now)
            except ValueError:
                continue
            if not candidate.subject or candidate.scheduled_for <= now:
                continue
            return self._intent(
                original,
                IntentType.REMINDER,
                template.confidence,
                subject=candidate.subject,
                scheduled_for=candidate.scheduled_for,
                recurrence=detect_recurrence(normalized),
            )
        return None

    def _match_summarize(
        self, normalized: str, original: str, now: datetime
    ) -> ParsedIntent | None:
        if _SUMMARIZE_RE.match(normalized):
            return self._intent(original, IntentType.SUMMARIZE, SUMMARIZE_CONFIDENCE)
        return None

    @staticmethod
    def _intent(
        original: str, intent_type: IntentType, confidence: float, **data
    ) -> ParsedIntent:
        return ParsedIntent(
            raw_text=original,
            intent_type=intent_type,
            confidence=confidence,
            data=IntentData(**data),
            source=IntentSource.RULES,
        )
