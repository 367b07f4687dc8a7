"""Shared fixtures and mocks for all tests."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from boomerang.config.settings import Settings
from boomerang.llm.client import LLMClient
from boomerang.scheduler.lifecycle import ReminderLifecycleManager
from boomerang.storage.store import ReminderStore
from boomerang.transport.base import SendResult, Transport

PHONE = "+15550001111"
OTHER_PHONE = "+15550002222"


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def mock_settings(monkeypatch):
    monkeypatch.setenv("BOOMERANG_OPENAI_API_KEY", "sk-test-key-fake")
    monkeypatch.setenv("BOOMERANG_OPENAI_MODEL", "gpt-4o-mini")
    monkeypatch.setenv("BOOMERANG_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("BOOMERANG_DB_PATH", ":memory:")
    monkeypatch.setenv("BOOMERANG_TRANSPORT_PROVIDER", "twilio")
    monkeypatch.setenv("BOOMERANG_TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setenv("BOOMERANG_TWILIO_AUTH_TOKEN", "token-123")
    return Settings()  # type: ignore[call-arg]


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 1, 20, 0, tzinfo=timezone.utc))


@pytest_asyncio.fixture
async def temp_db():
    store = ReminderStore(db_path=":memory:")
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def user(temp_db):
    u = await temp_db.get_or_create_user(PHONE)
    await temp_db.set_consent(u.id, True, at=datetime.now(timezone.utc))
    return await temp_db.get_user(u.id)


@pytest_asyncio.fixture
async def other_user(temp_db):
    return await temp_db.get_or_create_user(OTHER_PHONE)


@pytest.fixture
def mock_queue():
    queue = MagicMock()

    async def _enqueue(job_key, payload, delay=0, attempt=1):
        return job_key

    queue.enqueue = AsyncMock(side_effect=_enqueue)
    queue.cancel_by_key = AsyncMock(return_value=True)
    queue.has_job = MagicMock(return_value=False)
    queue.is_exhausted = MagicMock(return_value=False)
    return queue


@pytest.fixture
def lifecycle(temp_db, mock_queue, clock):
    return ReminderLifecycleManager(temp_db, mock_queue, clock=clock)


@pytest.fixture
def mock_transport():
    transport = AsyncMock(spec=Transport)
    transport.send = AsyncMock(
        return_value=SendResult(ok=True, provider_message_id="SM123")
    )
    return transport


@pytest.fixture
def mock_llm():
    """An LLM client whose reply is set per test via ``mock_llm.reply(...)``."""
    client = AsyncMock(spec=LLMClient)

    def _reply(data):
        client.complete = AsyncMock(
            return_value=data if isinstance(data, str) else json.dumps(data)
        )

    client.reply = _reply
    return client
