"""Selects the configured transport at startup."""

from __future__ import annotations

from boomerang.config.settings import Settings
from boomerang.exceptions import TransportError
from boomerang.transport.base import Transport
from boomerang.transport.meta import MetaTransport
from boomerang.transport.twilio import TwilioTransport


def create_transport(settings: Settings) -> Transport:
    provider = settings.transport_provider

    if provider == "meta":
        if not (settings.meta_access_token and settings.meta_phone_number_id):
            raise TransportError(
                "Meta transport needs BOOMERANG_META_ACCESS_TOKEN and "
                "BOOMERANG_META_PHONE_NUMBER_ID"
            )
        return MetaTransport(
            access_token=settings.meta_access_token,
            phone_number_id=settings.meta_phone_number_id,
            app_secret=settings.meta_app_secret,
        )

    if provider == "twilio":
        if not (settings.twilio_account_sid and settings.twilio_auth_token):
            raise TransportError(
                "Twilio transport needs BOOMERANG_TWILIO_ACCOUNT_SID and "
                "BOOMERANG_TWILIO_AUTH_TOKEN"
            )
        return TwilioTransport(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            from_number=settings.twilio_whatsapp_number,
        )

    raise TransportError(f"Unsupported transport provider: {provider}")
