"""LLM quick-reply suggestions for messages the parser could not classify."""

from __future__ import annotations

import json

from loguru import logger

from boomerang.assistant.prompt_templates import QUICK_REPLY_PROMPT_TEMPLATE
from boomerang.exceptions import LLMError
from boomerang.llm.client import LLMClient

FALLBACK_REPLIES = ["Got it!", "Thanks!", "Will do"]
MAX_REPLIES = 3
MAX_REPLY_LENGTH = 50


class QuickReplyGenerator:
    def __init__(self, client: LLMClient) -> None:
        self._client = client

    async def suggest(self, message: str) -> list[str]:
        prompt = QUICK_REPLY_PROMPT_TEMPLATE.format(message=message)
        try:
            raw = await self._client.complete(prompt, temperature=0.8, max_tokens=150)
            parsed = json.loads(raw.strip())
        except (LLMError, ValueError) as exc:
            logger.warning("Quick reply generation failed: {}", exc)
            return list(FALLBACK_REPLIES)

        if not isinstance(parsed, list):
            return list(FALLBACK_REPLIES)

        replies = [
            r for r in parsed[:MAX_REPLIES]
            if isinstance(r, str) and len(r) <= MAX_REPLY_LENGTH
        ]
        return replies or list(FALLBACK_REPLIES)
