"""Entry point and dependency wiring."""

from __future__ import annotations

from datetime import timedelta

from boomerang.assistant.handler import MessageHandler
from boomerang.assistant.quick_reply import QuickReplyGenerator
from boomerang.assistant.summarize import ThreadSummarizer
from boomerang.cli.app import app
from boomerang.config.settings import Settings
from boomerang.llm.client import LLMClient, OpenAIClient
from boomerang.parser.intent_parser import IntentParser
from boomerang.parser.llm_fallback import LLMFallbackAdapter
from boomerang.parser.strategies.rules import RuleStrategy
from boomerang.scheduler.delivery import DeliveryHandler
from boomerang.scheduler.lifecycle import ReminderLifecycleManager
from boomerang.scheduler.queue import DelayQueue
from boomerang.storage.store import ReminderStore
from boomerang.transport.base import Transport
from boomerang.transport.factory import create_transport
from boomerang.transport.webhook import WebhookReceiver

HOUSEKEEPING_INTERVAL_SECONDS = 3600


def build_parser(settings: Settings, client: LLMClient | None = None) -> IntentParser:
    client = client or OpenAIClient(settings)
    return IntentParser(
        [RuleStrategy(), LLMFallbackAdapter(client)],
        threshold=settings.confidence_threshold,
    )


class Services:
    """Everything a running assistant needs, built from one Settings object."""

    def __init__(
        self,
        settings: Settings,
        transport: Transport | None = None,
        llm: LLMClient | None = None,
    ) -> None:
        self.settings = settings
        retention = timedelta(days=settings.message_retention_days)

        self.llm = llm or OpenAIClient(settings)
        self.transport = transport or create_transport(settings)
        self.store = ReminderStore(db_path=settings.db_path)
        self.queue = DelayQueue(
            concurrency=settings.worker_concurrency,
            max_attempts=settings.job_max_attempts,
            backoff_seconds=settings.job_backoff_seconds,
        )
        self.parser = build_parser(settings, self.llm)
        self.lifecycle = ReminderLifecycleManager(self.store, self.queue)
        self.delivery = DeliveryHandler(
            self.store, self.transport, self.lifecycle, retention=retention
        )
        self.queue.register(self.delivery)
        self.handler = MessageHandler(
            store=self.store,
            parser=self.parser,
            lifecycle=self.lifecycle,
            transport=self.transport,
            summarizer=ThreadSummarizer(self.llm, max_messages=settings.summary_message_limit),
            quick_replies=QuickReplyGenerator(self.llm),
            retention=retention,
            summary_limit=settings.summary_message_limit,
        )
        self.webhooks = WebhookReceiver(self.transport, self.handler)

    async def initialize(self) -> None:
        await self.store.initialize()

    async def start_worker(self) -> int:
        """Start consuming due jobs; returns how many pending reminders were loaded."""
        loaded = await self.lifecycle.reschedule_pending()
        self.queue.add_interval_job(
            self.lifecycle.reschedule_pending,
            seconds=self.settings.poll_interval_seconds,
            job_id="poll-pending-reminders",
        )
        self.queue.add_interval_job(
            self.store.purge_expired_messages,
            seconds=HOUSEKEEPING_INTERVAL_SECONDS,
            job_id="purge-expired-messages",
        )
        self.queue.start()
        return loaded

    async def close(self) -> None:
        self.queue.shutdown()
        await self.transport.aclose()
        await self.store.close()


def build_services(settings: Settings | None = None) -> Services:
    settings = settings or Settings()  # type: ignore[call-arg]
    return Services(settings)


if __name__ == "__main__":
    app()
