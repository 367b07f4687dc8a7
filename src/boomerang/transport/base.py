"""Abstract base for chat transports."""

from __future__ import annotations

import abc

from pydantic import BaseModel


class SendResult(BaseModel):
    ok: bool
    provider_message_id: str | None = None
    error: str = ""


class Transport(abc.ABC):
    provider: str = ""

    @abc.abstractmethod
    async def send(self, destination: str, body: str) -> SendResult:
        ...  # pragma: no cover

    @abc.abstractmethod
    def verify_signature(self, payload: bytes, signature: str, url: str = "") -> bool:
        ...  # pragma: no cover

    async def aclose(self) -> None:
        return None
