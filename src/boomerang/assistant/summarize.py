"""LLM thread summaries."""

from __future__ import annotations

import json

from loguru import logger
from pydantic import BaseModel, Field

from boomerang.assistant.prompt_templates import SUMMARY_PROMPT_TEMPLATE
from boomerang.exceptions import LLMError
from boomerang.llm.client import LLMClient
from boomerang.models.message import Message, MessageDirection

MAX_ACTION_ITEMS = 3


class ThreadSummary(BaseModel):
    summary: str
    action_items: list[str] = Field(default_factory=list)


def format_conversation(messages: list[Message]) -> str:
    return "\n".join(
        f"{'User' if m.direction == MessageDirection.INBOUND else 'Assistant'}: {m.content}"
        for m in messages
    )


class ThreadSummarizer:
    def __init__(self, client: LLMClient, max_messages: int = 50) -> None:
        self._client = client
        self._max_messages = max_messages

    async def summarize(self, messages: list[Message]) -> ThreadSummary:
        if not messages:
            return ThreadSummary(summary="No messages to summarize.")

        prompt = SUMMARY_PROMPT_TEMPLATE.format(
            conversation=format_conversation(messages[-self._max_messages:])
        )
        try:
            raw = await self._client.complete(prompt, temperature=0.5, max_tokens=300)
            parsed = json.loads(raw.strip())
        except (LLMError, ValueError) as exc:
            logger.warning("Summarization failed: {}", exc)
            return ThreadSummary(summary="Unable to generate summary at this time.")

        if not isinstance(parsed, dict):
            return ThreadSummary(summary="Unable to generate summary at this time.")

        summary = parsed.get("summary")
        items = parsed.get("actionItems")
        return ThreadSummary(
            summary=summary if isinstance(summary, str) and summary else "Unable to generate summary.",
            action_items=[str(i) for i in items[:MAX_ACTION_ITEMS]]
            if isinstance(items, list)
            else [],
        )
