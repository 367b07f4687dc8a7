"""Message handler: consent gate, intent dispatch and logged replies for inbound text."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from loguru import logger

from boomerang.assistant.quick_reply import QuickReplyGenerator
from boomerang.assistant.summarize import ThreadSummarizer
from boomerang.models.intent import IntentType, ParseContext, ParsedIntent
from boomerang.models.message import Message, MessageDirection, User
from boomerang.parser.intent_parser import IntentParser
from boomerang.scheduler.lifecycle import ReminderLifecycleManager, utc_now
from boomerang.storage.store import ReminderStore
from boomerang.transport.base import Transport

WELCOME_TEXT = (
    "Great! I'm Boomerang, your WhatsApp assistant. I can help you:\n\n"
    "• Set reminders\n• Summarize threads\n• Quick replies\n\n"
    'Try: "Remind me tomorrow at 9am to call mom"'
)
OPT_IN_PROMPT = (
    "Hi, I'm Boomerang. I can help you set reminders and summarize threads. "
    "Reply YES to opt in."
)
REMINDER_HELP = (
    "I couldn't understand when to remind you. "
    'Try: "Remind me tomorrow at 9am to call mom"'
)
SNOOZE_HELP = 'How long should I snooze? Try: "Snooze for 30 minutes"'
CANCEL_HELP = 'Which reminder should I cancel? Try: "Cancel my reminder about rent"'
OPTED_OUT_TEXT = "You've been unsubscribed. Reply YES to opt back in."
ALREADY_SUBSCRIBED_TEXT = "You're already subscribed."


def format_when(moment: datetime) -> str:
    utc = moment.astimezone(timezone.utc)
    hour = utc.hour % 12 or 12
    return f"{utc:%b} {utc.day}, {utc.year} {hour}:{utc:%M %p} UTC"


class MessageHandler:
    def __init__(
        self,
        store: ReminderStore,
        parser: IntentParser,
        lifecycle: ReminderLifecycleManager,
        transport: Transport,
        summarizer: ThreadSummarizer,
        quick_replies: QuickReplyGenerator,
        retention: timedelta = timedelta(days=30),
        summary_limit: int = 50,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._parser = parser
        self._lifecycle = lifecycle
        self._transport = transport
        self._summarizer = summarizer
        self._quick_replies = quick_replies
        self._retention = retention
        self._summary_limit = summary_limit
        self._clock = clock

    async def handle(
        self,
        phone_number: str,
        text: str,
        provider_message_id: str | None = None,
        thread_id: str | None = None,
    ) -> str | None:
        # 1. Identify sender and keep the inbound message
        user = await self._store.get_or_create_user(phone_number)
        now = self._clock()
        inbound = Message(
            user_id=user.id,
            content=text,
            direction=MessageDirection.INBOUND,
            provider_message_id=provider_message_id,
            thread_id=thread_id,
            created_at=now,
            expires_at=now + self._retention,
        )
        await self._store.log_message(inbound)

        # 2. Consent gate
        if not user.consent_given:
            if text.strip().upper() == "YES":
                await self._store.set_consent(user.id, True, at=now)
                reply = WELCOME_TEXT
            else:
                reply = OPT_IN_PROMPT
            await self._reply(user, reply, thread_id)
            return reply

        # 3. Parse and remember what we understood
        intent = await self._parser.parse(
            text, context=ParseContext(user_id=user.id, thread_id=thread_id)
        )
        await self._store.set_message_intent(
            inbound.id,
            intent.intent_type.value,
            intent.data.model_dump_json(by_alias=True, exclude_none=True),
        )
        logger.info(
            "Message from user {} parsed as {} ({:.2f}, {})",
            user.id,
            intent.intent_type.value,
            intent.confidence,
            intent.source.value,
        )

        # 4. Act and answer
        reply = await self._dispatch(user, text, intent, thread_id)
        if reply:
            await self._reply(user, reply, thread_id)
        return reply

    async def _dispatch(
        self, user: User, text: str, intent: ParsedIntent, thread_id: str | None
    ) -> str | None:
        data = intent.data

        if intent.intent_type == IntentType.REMINDER:
            if not (data.scheduled_for and data.subject):
                return REMINDER_HELP
            await self._lifecycle.create(
                user.id,
                user.phone_number,
                data.subject,
                data.scheduled_for,
                original_text=text,
                recurrence=data.recurrence,
                recurrence_end=data.recurrence_end,
            )
            return (
                f"Got it, I'll remind you on {format_when(data.scheduled_for)}. "
                "Reply CANCEL to remove or SNOOZE to postpone."
            )

        if intent.intent_type == IntentType.SNOOZE:
            if not data.snooze_minutes:
                return SNOOZE_HELP
            new_id = await self._lifecycle.snooze_latest(user.id, data.snooze_minutes)
            if new_id is None:
                return "No active reminder found to snooze."
            return f"Snoozed for {data.snooze_minutes} minutes."

        if intent.intent_type == IntentType.CANCEL:
            if not data.subject:
                return CANCEL_HELP
            count = await self._lifecycle.cancel_matching(user.id, data.subject)
            if count == 0:
                return "No matching reminder found to cancel."
            return f"Cancelled {count} reminder(s)."

        if intent.intent_type == IntentType.SUMMARIZE:
            messages = await self._store.get_thread_messages(
                user.id, thread_id=thread_id, limit=self._summary_limit
            )
            if not messages:
                return "No messages found to summarize."
            summary = await self._summarizer.summarize(messages)
            lines = [f"📋 Summary:\n{summary.summary}"]
            if summary.action_items:
                items = "\n".join(f"• {item}" for item in summary.action_items)
                lines.append(f"Action items:\n{items}")
            return "\n\n".join(lines)

        if intent.intent_type == IntentType.OPT_OUT:
            await self._store.set_consent(user.id, False)
            return OPTED_OUT_TEXT

        if intent.intent_type == IntentType.OPT_IN:
            return ALREADY_SUBSCRIBED_TEXT

        replies = await self._quick_replies.suggest(text)
        options = "\n".join(f"• {r}" for r in replies)
        return f"I'm not sure how to help with that. Quick replies:\n{options}"

    async def _reply(self, user: User, body: str, thread_id: str | None = None) -> None:
        result = await self._transport.send(user.phone_number, body)
        if not result.ok:
            logger.warning("Reply to user {} failed: {}", user.id, result.error)
        now = self._clock()
        await self._store.log_message(
            Message(
                user_id=user.id,
                content=body,
                direction=MessageDirection.OUTBOUND,
                provider_message_id=result.provider_message_id,
                thread_id=thread_id,
                created_at=now,
                expires_at=now + self._retention,
            )
        )
