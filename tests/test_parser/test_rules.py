"""Tests for the rule matcher and the rule parse tier."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from boomerang.models.intent import IntentSource, IntentType
from boomerang.models.reminder import RecurrenceType
from boomerang.parser.rules import (
    EXPLICIT_REMINDER_CONFIDENCE,
    GUESSED_REMINDER_CONFIDENCE,
    TEMPLATE_REMINDER_CONFIDENCE,
    RuleMatcher,
    detect_recurrence,
)
from boomerang.parser.strategies.rules import RuleStrategy, normalize

NOW = datetime(2025, 1, 1, 20, 0, tzinfo=timezone.utc)


def match(text: str, now: datetime = NOW):
    return RuleMatcher().match(normalize(text), text, now=now)


class TestOptPhrases:
    @pytest.mark.parametrize("text", ["YES", "yes", "  Okay ", "I agree", "sure"])
    def test_opt_in(self, text):
        intent = match(text)
        assert intent.intent_type == IntentType.OPT_IN
        assert intent.confidence == 0.95

    @pytest.mark.parametrize("text", ["stop", "STOP", "unsubscribe", "opt-out", "no"])
    def test_opt_out(self, text):
        intent = match(text)
        assert intent.intent_type == IntentType.OPT_OUT
        assert intent.confidence == 0.95

    def test_opt_words_inside_sentence_do_not_match(self):
        assert match("yes please remind me").intent_type != IntentType.OPT_IN


class TestCancel:
    def test_cancel_about(self):
        intent = match("Cancel my reminder about rent")
        assert intent.intent_type == IntentType.CANCEL
        assert intent.data.subject == "rent"
        assert intent.confidence == 0.9

    @pytest.mark.parametrize(
        "text,subject",
        [
            ("delete reminder for dentist", "dentist"),
            ("remove my reminders to call mom", "call mom"),
            ("stop reminder gym", "gym"),
        ],
    )
    def test_cancel_variants(self, text, subject):
        intent = match(text)
        assert intent.intent_type == IntentType.CANCEL
        assert intent.data.subject == subject

    def test_reminder_phrase_is_not_taken_as_cancel(self):
        intent = match("Remind me tomorrow at 9am to stop smoking")
        assert intent.intent_type == IntentType.REMINDER


class TestSnooze:
    def test_snooze_minutes(self):
        intent = match("Snooze this for 30 minutes")
        assert intent.intent_type == IntentType.SNOOZE
        assert intent.data.snooze_minutes == 30
        assert intent.confidence == 0.9

    @pytest.mark.parametrize(
        "text,minutes",
        [
            ("snooze 2 hours", 120),
            ("postpone for 1h", 60),
            ("delay 15 mins", 15),
            ("snooze 10m", 10),
        ],
    )
    def test_unit_normalization(self, text, minutes):
        assert match(text).data.snooze_minutes == minutes

    def test_zero_is_not_a_snooze(self):
        assert match("snooze 0 minutes").intent_type != IntentType.SNOOZE


class TestExplicitDirective:
    def test_future_date_accepted(self):
        intent = match("/remind 2025-12-01 18:00 Pay rent")
        assert intent.intent_type == IntentType.REMINDER
        assert intent.data.subject == "Pay rent"
        assert intent.data.scheduled_for == datetime(2025, 12, 1, 18, 0, tzinfo=timezone.utc)
        assert intent.confidence == EXPLICIT_REMINDER_CONFIDENCE

    def test_past_date_falls_through(self):
        later = datetime(2026, 1, 1, tzinfo=timezone.utc)
        intent = match("/remind 2025-12-01 18:00 Pay rent", now=later)
        assert intent.intent_type == IntentType.UNKNOWN

    def test_invalid_date_falls_through(self):
        assert match("/remind 2025-13-45 18:00 Pay rent").intent_type == IntentType.UNKNOWN

    def test_uses_timezone_of_now(self):
        tz = timezone(timedelta(hours=2))
        intent = match("/remind 2025-12-01 18:00 Pay rent", now=NOW.astimezone(tz))
        assert intent.data.scheduled_for.utcoffset() == timedelta(hours=2)


class TestReminderTemplates:
    def test_tomorrow_at_9am(self):
        intent = match("Remind me tomorrow at 9am to call mom")
        assert intent.intent_type == IntentType.REMINDER
        assert intent.data.subject == "call mom"
        assert intent.data.scheduled_for == datetime(2025, 1, 2, 9, 0, tzinfo=timezone.utc)
        assert intent.confidence == TEMPLATE_REMINDER_CONFIDENCE
        assert intent.source == IntentSource.RULES

    def test_today_in_the_past_rolls_forward(self):
        intent = match("remind me today at 9am to water plants")
        assert intent.data.scheduled_for == datetime(2025, 1, 2, 9, 0, tzinfo=timezone.utc)

    def test_today_later(self):
        intent = match("remind me today at 10:30 pm about the oven")
        assert intent.data.scheduled_for == datetime(2025, 1, 1, 22, 30, tzinfo=timezone.utc)
        assert intent.data.subject == "the oven"

    def test_twelve_am_is_midnight(self):
        intent = match("remind me tomorrow at 12am to lock up")
        assert intent.data.scheduled_for == datetime(2025, 1, 2, 0, 0, tzinfo=timezone.utc)

    def test_invalid_hour_falls_through(self):
        intent = match("remind me today at 13pm to call mom")
        assert intent.intent_type == IntentType.UNKNOWN

    def test_hour_out_of_range_without_meridiem(self):
        assert match("remind me tomorrow at 25 to call mom").intent_type == IntentType.UNKNOWN

    @pytest.mark.parametrize(
        "text,delta",
        [
            ("ping me in 2 hours about laundry", timedelta(hours=2)),
            ("remind me in 15 minutes to stretch", timedelta(minutes=15)),
            ("alert me in 3 days that taxes are due", timedelta(days=3)),
            ("remind me 1 week for review", timedelta(weeks=1)),
        ],
    )
    def test_offsets(self, text, delta):
        intent = match(text)
        assert intent.intent_type == IntentType.REMINDER
        assert intent.data.scheduled_for == NOW + delta
        assert intent.confidence == TEMPLATE_REMINDER_CONFIDENCE

    def test_zero_offset_is_not_future(self):
        assert match("remind me in 0 minutes to stretch").intent_type == IntentType.UNKNOWN

    def test_guessed_time_is_low_confidence(self):
        intent = match("remind me to call bob tomorrow")
        assert intent.intent_type == IntentType.REMINDER
        assert intent.data.subject == "call bob"
        assert intent.data.scheduled_for == NOW + timedelta(hours=1)
        assert intent.confidence == GUESSED_REMINDER_CONFIDENCE

    def test_subject_keeps_original_case(self):
        intent = match("Remind me tomorrow at 9am to call Mom")
        assert intent.data.subject == "call Mom"

    def test_recurrence_attached(self):
        intent = match("remind me tomorrow at 8am to take pills daily")
        assert intent.data.recurrence == RecurrenceType.DAILY

    def test_no_recurrence_by_default(self):
        assert match("Remind me tomorrow at 9am to call mom").data.recurrence is None

    def test_every_template_result_is_in_the_future(self):
        for text in (
            "remind me today at 8pm to eat",
            "remind me today at 20:00 to eat",
            "remind me tomorrow at 9 to eat",
            "ping me in 1 minute about eggs",
        ):
            intent = match(text)
            if intent.intent_type == IntentType.REMINDER:
                assert intent.data.scheduled_for > NOW


class TestSummarize:
    @pytest.mark.parametrize(
        "text",
        ["summarize", "Summarize this thread", "tl;dr", "TLDR", "recap this chat", "summary?"],
    )
    def test_summary_phrases(self, text):
        intent = match(text)
        assert intent.intent_type == IntentType.SUMMARIZE
        assert intent.confidence == 0.9


class TestUnknown:
    def test_no_match(self):
        intent = match("what's the weather like?")
        assert intent.intent_type == IntentType.UNKNOWN
        assert intent.confidence == 0.1
        assert intent.raw_text == "what's the weather like?"


class TestDetectRecurrence:
    def test_weekly(self):
        assert detect_recurrence("water plants weekly") == RecurrenceType.WEEKLY

    def test_monthly(self):
        assert detect_recurrence("pay rent monthly") == RecurrenceType.MONTHLY

    def test_none(self):
        assert detect_recurrence("pay rent") is None


class TestRuleStrategy:
    def test_normalize(self):
        assert normalize("  Hello There ") == "hello there"

    @pytest.mark.asyncio
    async def test_parse(self):
        strategy = RuleStrategy()
        intent = await strategy.parse("Cancel my reminder about rent", now=NOW)
        assert strategy.name == "rules"
        assert intent.intent_type == IntentType.CANCEL
