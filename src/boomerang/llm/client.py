"""Completion clients for the LLM collaborator."""

from __future__ import annotations

import abc

from openai import AsyncOpenAI

from boomerang.config.settings import Settings
from boomerang.exceptions import LLMError


class LLMClient(abc.ABC):
    @abc.abstractmethod
    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 500,
        response_format: dict | None = None,
    ) -> str:
        ...  # pragma: no cover


class OpenAIClient(LLMClient):
    """Single request/response chat completion against an OpenAI-compatible API."""

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings
        self._client = client or AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
        )

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 500,
        response_format: dict | None = None,
    ) -> str:
        kwargs: dict = {
            "model": self._settings.openai_model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if response_format is not None:
            kwargs["response_format"] = response_format

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as exc:
            raise LLMError(f"OpenAI API error: {exc}") from exc

        if not response.choices:
            raise LLMError("OpenAI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise LLMError("OpenAI returned empty content")
        return content
