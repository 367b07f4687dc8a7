"""Tests for the LLM parse tier."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from boomerang.exceptions import ParseError
from boomerang.models.intent import IntentSource, IntentType, ParseContext
from boomerang.models.reminder import RecurrenceType
from boomerang.parser.llm_fallback import LLMFallbackAdapter, _format_context
from boomerang.parser.prompt_templates import INTENT_PROMPT_TEMPLATE, NO_CONTEXT
from boomerang.parser.schemas import INTENT_JSON_SCHEMA

NOW = datetime(2025, 1, 1, 20, 0, tzinfo=timezone.utc)


class TestParseReply:
    def setup_method(self):
        self.adapter = LLMFallbackAdapter(client=None)

    def test_reminder_with_dates(self):
        raw = json.dumps(
            {
                "type": "REMINDER",
                "confidence": 0.92,
                "data": {
                    "subject": "water plants",
                    "scheduledFor": "2025-01-06T08:00:00Z",
                    "recurrence": "WEEKLY",
                    "recurrenceEnd": "2025-06-01T00:00:00+00:00",
                },
            }
        )
        intent = self.adapter.parse_reply(raw, "every monday water plants")
        assert intent.intent_type == IntentType.REMINDER
        assert intent.source == IntentSource.LLM
        assert intent.raw_text == "every monday water plants"
        assert intent.data.scheduled_for == datetime(2025, 1, 6, 8, tzinfo=timezone.utc)
        assert intent.data.recurrence == RecurrenceType.WEEKLY
        assert intent.data.recurrence_end == datetime(2025, 6, 1, tzinfo=timezone.utc)

    def test_naive_datetime_treated_as_utc(self):
        raw = json.dumps(
            {"type": "REMINDER", "confidence": 0.9, "data": {"subject": "x", "scheduledFor": "2025-01-02T09:00:00"}}
        )
        intent = self.adapter.parse_reply(raw, "x")
        assert intent.data.scheduled_for.tzinfo is not None
        assert intent.data.scheduled_for == datetime(2025, 1, 2, 9, tzinfo=timezone.utc)

    def test_recurrence_type_key_accepted(self):
        raw = json.dumps(
            {"type": "REMINDER", "confidence": 0.9, "data": {"subject": "x", "recurrenceType": "DAILY"}}
        )
        assert self.adapter.parse_reply(raw, "x").data.recurrence == RecurrenceType.DAILY

    def test_null_fields(self):
        raw = json.dumps(
            {
                "type": "SNOOZE",
                "confidence": 0.8,
                "data": {
                    "subject": None,
                    "scheduledFor": None,
                    "snoozeMinutes": 45,
                    "recurrence": None,
                    "recurrenceEnd": None,
                    "query": None,
                },
            }
        )
        intent = self.adapter.parse_reply(raw, "later pls")
        assert intent.data.snooze_minutes == 45
        assert intent.data.scheduled_for is None

    def test_missing_data_is_empty(self):
        intent = self.adapter.parse_reply('{"type": "SUMMARIZE", "confidence": 0.7}', "tl")
        assert intent.intent_type == IntentType.SUMMARIZE
        assert intent.data.subject is None

    def test_surrounding_whitespace(self):
        intent = self.adapter.parse_reply('\n  {"type": "OPT_IN", "confidence": 1}  \n', "ya")
        assert intent.intent_type == IntentType.OPT_IN

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "[1, 2, 3]",
            '{"type": "DANCE", "confidence": 0.9}',
            '{"confidence": 0.9}',
            '{"type": "REMINDER"}',
            '{"type": "REMINDER", "confidence": 1.5}',
            '{"type": "REMINDER", "confidence": 0.9, "data": "tomorrow"}',
            '{"type": "SNOOZE", "confidence": 0.9, "data": {"snoozeMinutes": -5}}',
            '{"type": "REMINDER", "confidence": 0.9, "data": {"scheduledFor": "next week-ish"}}',
            '{"type": "REMINDER", "confidence": 0.9, "data": {"recurrence": "HOURLY"}}',
        ],
    )
    def test_invalid_replies_raise(self, raw):
        with pytest.raises(ParseError):
            self.adapter.parse_reply(raw, "text")


class TestLLMFallbackAdapter:
    @pytest.mark.asyncio
    async def test_parse_requests_structured_output(self, mock_llm):
        mock_llm.reply({"type": "CANCEL", "confidence": 0.85, "data": {"subject": "gym"}})
        adapter = LLMFallbackAdapter(mock_llm)

        intent = await adapter.parse("drop the gym thing", now=NOW)

        assert adapter.name == "llm"
        assert intent.intent_type == IntentType.CANCEL
        kwargs = mock_llm.complete.call_args.kwargs
        assert kwargs["temperature"] == 0.0
        assert kwargs["max_tokens"] == 500
        assert kwargs["response_format"] == {
            "type": "json_schema",
            "json_schema": INTENT_JSON_SCHEMA,
        }
        prompt = mock_llm.complete.call_args.args[0]
        assert NOW.isoformat() in prompt
        assert 'Message: "drop the gym thing"' in prompt
        assert NO_CONTEXT in prompt

    @pytest.mark.asyncio
    async def test_parse_propagates_parse_error(self, mock_llm):
        mock_llm.reply("garbage")
        with pytest.raises(ParseError):
            await LLMFallbackAdapter(mock_llm).parse("x", now=NOW)


class TestPromptAndSchema:
    def test_template_formats(self):
        prompt = INTENT_PROMPT_TEMPLATE.format(now="NOW", context="CTX", text="hello")
        assert "Current time: NOW" in prompt
        assert "CTX" in prompt
        assert '"type": "REMINDER"' in prompt

    def test_schema_requires_every_field(self):
        schema = INTENT_JSON_SCHEMA["schema"]
        assert INTENT_JSON_SCHEMA["strict"] is True
        assert set(schema["required"]) == {"type", "confidence", "data"}
        data = schema["properties"]["data"]
        assert set(data["required"]) == set(data["properties"])
        assert "UNKNOWN" in schema["properties"]["type"]["enum"]

    def test_format_context(self):
        assert _format_context(None) == NO_CONTEXT
        assert _format_context(ParseContext()) == NO_CONTEXT
        assert _format_context(ParseContext(user_id="u1")) == "Context: user=u1"
        assert _format_context(ParseContext(user_id="u1", thread_id="t1")) == (
            "Context: user=u1, thread=t1"
        )
