"""Meta Cloud API (WhatsApp Business) transport."""

from __future__ import annotations

import hashlib
import hmac

import httpx
from loguru import logger

from boomerang.transport.base import SendResult, Transport

GRAPH_API_URL = "https://graph.facebook.com/v18.0"


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"HTTP {response.status_code}"


def _message_id(response: httpx.Response) -> str | None:
    try:
        return response.json()["messages"][0]["id"]
    except (ValueError, KeyError, IndexError, TypeError):
        return None


class MetaTransport(Transport):
    provider = "meta"

    def __init__(
        self,
        access_token: str,
        phone_number_id: str,
        app_secret: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._access_token = access_token
        self._url = f"{GRAPH_API_URL}/{phone_number_id}/messages"
        self._app_secret = app_secret
        self._client = client or httpx.AsyncClient(timeout=10.0)

    async def send(self, destination: str, body: str) -> SendResult:
        try:
            response = await self._client.post(
                self._url,
                json={
                    "messaging_product": "whatsapp",
                    "to": destination,
                    "type": "text",
                    "text": {"body": body},
                },
                headers={"Authorization": f"Bearer {self._access_token}"},
            )
        except httpx.HTTPError as exc:
            return SendResult(ok=False, error=str(exc))

        if response.is_error:
            return SendResult(ok=False, error=_error_message(response))

        return SendResult(ok=True, provider_message_id=_message_id(response))

    def verify_signature(self, payload: bytes, signature: str, url: str = "") -> bool:
        """Check an ``X-Hub-Signature-256`` header against the raw request body."""
        if not self._app_secret or not signature:
            return False
        expected = hmac.new(
            self._app_secret.encode(), payload, hashlib.sha256
        ).hexdigest()
        valid = hmac.compare_digest(expected, signature.removeprefix("sha256="))
        if not valid:
            logger.warning("Rejected Meta webhook with a bad signature")
        return valid

    async def aclose(self) -> None:
        await self._client.aclose()
