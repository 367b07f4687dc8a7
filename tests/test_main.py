"""Tests for dependency wiring."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from boomerang.assistant.handler import MessageHandler
from boomerang.llm.client import OpenAIClient
from boomerang.main import (
    HOUSEKEEPING_INTERVAL_SECONDS,
    Services,
    build_parser,
    build_services,
)
from boomerang.parser.intent_parser import IntentParser
from boomerang.parser.llm_fallback import LLMFallbackAdapter
from boomerang.parser.strategies.rules import RuleStrategy
from boomerang.scheduler.delivery import DeliveryHandler
from boomerang.scheduler.lifecycle import ReminderLifecycleManager
from boomerang.scheduler.queue import DelayQueue
from boomerang.storage.store import ReminderStore
from boomerang.transport.twilio import TwilioTransport
from boomerang.transport.webhook import WebhookReceiver


class TestBuildParser:
    def test_rules_then_llm(self, mock_settings, mock_llm):
        parser = build_parser(mock_settings, mock_llm)
        assert isinstance(parser, IntentParser)
        assert [type(t) for t in parser._tiers] == [RuleStrategy, LLMFallbackAdapter]
        assert parser.threshold == mock_settings.confidence_threshold

    def test_default_client(self, mock_settings):
        parser = build_parser(mock_settings)
        assert isinstance(parser._tiers[1]._client, OpenAIClient)


class TestServices:
    def test_wiring(self, mock_settings):
        services = build_services(mock_settings)
        assert isinstance(services, Services)
        assert isinstance(services.llm, OpenAIClient)
        assert isinstance(services.transport, TwilioTransport)
        assert isinstance(services.store, ReminderStore)
        assert isinstance(services.queue, DelayQueue)
        assert isinstance(services.lifecycle, ReminderLifecycleManager)
        assert isinstance(services.delivery, DeliveryHandler)
        assert isinstance(services.handler, MessageHandler)
        assert services.queue._handler is services.delivery
        assert isinstance(services.webhooks, WebhookReceiver)

    def test_injected_collaborators(self, mock_settings, mock_llm, mock_transport):
        services = Services(mock_settings, transport=mock_transport, llm=mock_llm)
        assert services.transport is mock_transport
        assert services.llm is mock_llm

    @pytest.mark.asyncio
    async def test_start_worker(self, mock_settings, mock_llm, mock_transport):
        services = Services(mock_settings, transport=mock_transport, llm=mock_llm)
        await services.initialize()
        services.lifecycle.reschedule_pending = AsyncMock(return_value=4)
        services.queue.start = MagicMock()

        try:
            assert await services.start_worker() == 4
            assert services.queue.has_job("poll-pending-reminders")
            purge = services.queue.scheduler.get_job("purge-expired-messages")
            assert purge.trigger.interval.total_seconds() == HOUSEKEEPING_INTERVAL_SECONDS
            services.queue.start.assert_called_once()
        finally:
            await services.close()

        mock_transport.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_end_to_end_reminder(self, mock_settings, mock_llm, mock_transport):
        services = Services(mock_settings, transport=mock_transport, llm=mock_llm)
        await services.initialize()
        try:
            await services.handler.handle("+1555", "YES")
            reply = await services.handler.handle("+1555", "remind me in 2 hours to stretch")
            assert reply.startswith("Got it, I'll remind you on")

            user = await services.store.get_user_by_phone("+1555")
            [reminder] = await services.store.find_pending_reminders(user_id=user.id)
            assert services.queue.has_job(f"reminder-{reminder.id}")

            job = services.queue.scheduler.get_job(f"reminder-{reminder.id}")
            assert await services.queue.dispatch(*job.args) is True
            delivered = await services.store.get_reminder(reminder.id)
            assert delivered.status.value == "DELIVERED"
        finally:
            await services.close()
