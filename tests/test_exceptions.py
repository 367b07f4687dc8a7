"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from boomerang.exceptions import (
    BoomerangError,
    DeliveryError,
    LLMError,
    ParseError,
    StoreError,
    TransportError,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc_class", [ParseError, LLMError, TransportError, StoreError, DeliveryError]
    )
    def test_inherits_from_base(self, exc_class):
        assert issubclass(exc_class, BoomerangError)
        assert issubclass(exc_class, Exception)

    def test_message(self):
        assert str(ParseError("bad json")) == "bad json"

    def test_catch_as_base(self):
        with pytest.raises(BoomerangError):
            raise LLMError("down")


class TestDeliveryError:
    def test_carries_reminder_id(self):
        err = DeliveryError("send failed", reminder_id="r1")
        assert err.reminder_id == "r1"
        assert str(err) == "send failed"

    def test_default_reminder_id(self):
        assert DeliveryError("x").reminder_id == ""
