"""Custom exception hierarchy for Boomerang."""

from __future__ import annotations


class BoomerangError(Exception):
    """Base exception for all Boomerang errors."""


class ParseError(BoomerangError):
    """Raised when a parse tier cannot turn a reply into an intent."""


class LLMError(BoomerangError):
    """Raised when the completion service call fails."""


class TransportError(BoomerangError):
    """Raised when a chat transport cannot be built or used."""


class StoreError(BoomerangError):
    """Raised when the store is used before it has been initialized."""


class DeliveryError(BoomerangError):
    """Raised when a reminder could not be delivered and should be retried."""

    def __init__(self, message: str, reminder_id: str = "") -> None:
        super().__init__(message)
        self.reminder_id = reminder_id
