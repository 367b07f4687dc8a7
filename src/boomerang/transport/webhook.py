"""Inbound webhooks: signature check, payload decoding and message extraction."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl

from loguru import logger
from pydantic import BaseModel

from boomerang.exceptions import TransportError
from boomerang.transport.base import Transport
from boomerang.transport.twilio import WHATSAPP_PREFIX

if TYPE_CHECKING:
    from boomerang.assistant.handler import MessageHandler


class InboundMessage(BaseModel):
    phone_number: str
    text: str
    provider_message_id: str | None = None


def _meta_message(payload: dict[str, Any]) -> dict[str, Any] | None:
    try:
        return payload["entry"][0]["changes"][0]["value"]["messages"][0]
    except (KeyError, IndexError, TypeError):
        return None


def extract_inbound(provider: str, payload: dict[str, Any]) -> InboundMessage | None:
    """Return the sender, text and id of a webhook payload, or None if it carries no text."""
    if provider == "meta":
        message = _meta_message(payload)
        if not message:
            return None
        phone = message.get("from")
        text = (message.get("text") or {}).get("body")
        message_id = message.get("id")
    elif provider == "twilio":
        phone = payload.get("From")
        if phone:
            phone = phone.removeprefix(WHATSAPP_PREFIX)
        text = payload.get("Body")
        message_id = payload.get("MessageSid")
    else:
        raise ValueError(f"Unknown provider: {provider}")

    if not phone or not text:
        return None
    return InboundMessage(phone_number=phone, text=text, provider_message_id=message_id)


def verify_subscription(
    mode: str | None, token: str | None, challenge: str | None, verify_token: str | None
) -> str | None:
    """Meta webhook handshake: echo ``challenge`` when the token matches."""
    if mode == "subscribe" and verify_token and token == verify_token:
        return challenge
    return None


def decode_payload(provider: str, raw: bytes) -> dict[str, Any]:
    """Meta posts JSON, Twilio posts a form-encoded body."""
    if provider == "meta":
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError("Meta webhook body must be a JSON object")
        return payload
    if provider == "twilio":
        return dict(parse_qsl(raw.decode("utf-8"), keep_blank_values=True))
    raise ValueError(f"Unknown provider: {provider}")


class WebhookReceiver:
    """Runs one provider webhook delivery through the message handler."""

    def __init__(self, transport: Transport, handler: MessageHandler) -> None:
        self._transport = transport
        self._handler = handler

    async def receive(self, raw: bytes, signature: str, url: str = "") -> str | None:
        provider = self._transport.provider
        if not self._transport.verify_signature(raw, signature, url=url):
            raise TransportError(f"Invalid {provider} webhook signature")

        try:
            payload = decode_payload(provider, raw)
        except (ValueError, UnicodeDecodeError) as exc:
            raise TransportError(f"Malformed {provider} webhook body: {exc}") from exc

        inbound = extract_inbound(provider, payload)
        if inbound is None:
            logger.debug("Ignoring {} webhook without a text message", provider)
            return None

        return await self._handler.handle(
            inbound.phone_number,
            inbound.text,
            provider_message_id=inbound.provider_message_id,
        )
