"""LLM tier: one completion request, parsed strictly into a ParsedIntent."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from dateutil.parser import isoparse
from loguru import logger

from boomerang.exceptions import ParseError
from boomerang.llm.client import LLMClient
from boomerang.models.intent import (
    IntentData,
    IntentSource,
    IntentType,
    ParseContext,
    ParsedIntent,
)
from boomerang.parser.prompt_templates import INTENT_PROMPT_TEMPLATE, NO_CONTEXT
from boomerang.parser.schemas import INTENT_JSON_SCHEMA
from boomerang.parser.strategies.base import ParseStrategy

_DATE_KEYS = ("scheduledFor", "scheduled_for", "recurrenceEnd", "recurrence_end")


def _to_aware(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    parsed = isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_context(context: ParseContext | None) -> str:
    if context is None or not (context.user_id or context.thread_id):
        return NO_CONTEXT
    parts = []
    if context.user_id:
        parts.append(f"user={context.user_id}")
    if context.thread_id:
        parts.append(f"thread={context.thread_id}")
    return "Context: " + ", ".join(parts)


class LLMFallbackAdapter(ParseStrategy):
    name = "llm"

    def __init__(
        self,
        client: LLMClient,
        temperature: float = 0.0,
        max_tokens: int = 500,
    ) -> None:
        self._client = client
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def parse(
        self,
        text: str,
        context: ParseContext | None = None,
        now: datetime | None = None,
    ) -> ParsedIntent:
        now = now or datetime.now(timezone.utc)
        prompt = INTENT_PROMPT_TEMPLATE.format(
            now=now.isoformat(),
            context=_format_context(context),
            text=text,
        )
        raw = await self._client.complete(
            prompt,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            response_format={"type": "json_schema", "json_schema": INTENT_JSON_SCHEMA},
        )
        return self.parse_reply(raw, text)

    def parse_reply(self, raw: str, text: str) -> ParsedIntent:
        try:
            payload = json.loads(raw.strip())
        except json.JSONDecodeError as exc:
            raise ParseError(f"Malformed JSON from LLM: {exc}") from exc

        if not isinstance(payload, dict):
            raise ParseError("LLM reply is not a JSON object")

        try:
            intent_type = IntentType(payload.get("type"))
        except ValueError as exc:
            raise ParseError(f"Unrecognized intent type: {payload.get('type')!r}") from exc

        raw_data = payload.get("data") or {}
        if not isinstance(raw_data, dict):
            raise ParseError("LLM reply 'data' is not an object")

        fields = dict(raw_data)
        if "recurrence" not in fields and "recurrenceType" in fields:
            fields["recurrence"] = fields.pop("recurrenceType")

        try:
            for key in _DATE_KEYS:
                if key in fields:
                    fields[key] = _to_aware(fields[key])
            intent = ParsedIntent(
                raw_text=text,
                intent_type=intent_type,
                confidence=float(payload["confidence"]),
                data=IntentData.model_validate(fields),
                source=IntentSource.LLM,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ParseError(f"Invalid intent fields from LLM: {exc}") from exc

        logger.debug(
            "LLM classified message as {} ({:.2f})",
            intent.intent_type.value,
            intent.confidence,
        )
        return intent
