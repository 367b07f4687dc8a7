"""Twilio WhatsApp transport."""

from __future__ import annotations

import base64
import hashlib
import hmac
from urllib.parse import parse_qsl

import httpx
from loguru import logger

from boomerang.transport.base import SendResult, Transport

TWILIO_API_URL = "https://api.twilio.com/2010-04-01"
WHATSAPP_PREFIX = "whatsapp:"


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json()["message"]
    except (ValueError, KeyError, TypeError):
        return f"HTTP {response.status_code}"


def _message_sid(response: httpx.Response) -> str | None:
    try:
        return response.json()["sid"]
    except (ValueError, KeyError, TypeError):
        return None


class TwilioTransport(Transport):
    provider = "twilio"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str = "whatsapp:+14155238886",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number
        self._url = f"{TWILIO_API_URL}/Accounts/{account_sid}/Messages.json"
        self._client = client or httpx.AsyncClient(timeout=10.0)

    async def send(self, destination: str, body: str) -> SendResult:
        to = destination if destination.startswith(WHATSAPP_PREFIX) else WHATSAPP_PREFIX + destination
        try:
            response = await self._client.post(
                self._url,
                data={"From": self._from_number, "To": to, "Body": body},
                auth=(self._account_sid, self._auth_token),
            )
        except httpx.HTTPError as exc:
            return SendResult(ok=False, error=str(exc))

        if response.is_error:
            return SendResult(ok=False, error=_error_message(response))
        return SendResult(ok=True, provider_message_id=_message_sid(response))

    def verify_signature(self, payload: bytes, signature: str, url: str = "") -> bool:
        """Check an ``X-Twilio-Signature`` header.

        Twilio signs the full request URL followed by every form parameter,
        sorted by name, as ``name + value`` pairs (HMAC-SHA1, base64).
        """
        if not signature:
            return False
        params = sorted(parse_qsl(payload.decode("utf-8"), keep_blank_values=True))
        data = url + "".join(f"{key}{value}" for key, value in params)
        digest = hmac.new(self._auth_token.encode(), data.encode(), hashlib.sha1).digest()
        valid = hmac.compare_digest(base64.b64encode(digest).decode(), signature)
        if not valid:
            logger.warning("Rejected Twilio webhook with a bad signature")
        return valid

    async def aclose(self) -> None:
        await self._client.aclose()
