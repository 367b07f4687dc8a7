"""SQLite-backed store for users, reminders and messages."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from boomerang.exceptions import StoreError
from boomerang.models.message import Message, User
from boomerang.models.reminder import Reminder, ReminderStatus
from boomerang.storage.migrations import TABLES

_STATUS_TIMESTAMP = {
    ReminderStatus.DELIVERED: "delivered_at",
    ReminderStatus.CANCELLED: "cancelled_at",
}

_REMINDER_COLUMNS = (
    "id, user_id, subject, scheduled_for, status, is_recurring, recurrence_type, "
    "recurrence_end, original_text, delivered_at, cancelled_at, created_at"
)

_MESSAGE_COLUMNS = (
    "id, user_id, provider_message_id, thread_id, content, direction, intent, "
    "intent_data, created_at, expires_at"
)


def to_db_time(value: datetime | None) -> str | None:
    """Store every timestamp as UTC ISO-8601 so text ordering matches time ordering."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


class ReminderStore:
    def __init__(self, db_path: Path | str = ":memory:") -> None:
        self.db_path = str(db_path)
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self.db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.execute("PRAGMA foreign_keys = ON")
        for table_sql in TABLES:
            await self._db.execute(table_sql)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    def _get_db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StoreError("ReminderStore not initialized, call initialize() first")
        return self._db

    async def ping(self) -> bool:
        cursor = await self._get_db().execute("SELECT 1")
        return (await cursor.fetchone()) is not None

    # Users

    async def get_or_create_user(self, phone_number: str) -> User:
        user = await self.get_user_by_phone(phone_number)
        if user is not None:
            return user
        user = User(phone_number=phone_number)
        db = self._get_db()
        await db.execute(
            "INSERT INTO users (id, phone_number, consent_given, consent_date, created_at) "
            "VALUES (?, ?, ?, ?, ?)",
            (
                user.id,
                user.phone_number,
                int(user.consent_given),
                to_db_time(user.consent_date),
                to_db_time(user.created_at),
            ),
        )
        await db.commit()
        return user

    async def get_user(self, user_id: str) -> User | None:
        cursor = await self._get_db().execute(
            "SELECT id, phone_number, consent_given, consent_date, created_at "
            "FROM users WHERE id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        return User(**dict(row)) if row else None

    async def get_user_by_phone(self, phone_number: str) -> User | None:
        cursor = await self._get_db().execute(
            "SELECT id, phone_number, consent_given, consent_date, created_at "
            "FROM users WHERE phone_number = ?",
            (phone_number,),
        )
        row = await cursor.fetchone()
        return User(**dict(row)) if row else None

    async def set_consent(self, user_id: str, given: bool, at: datetime | None = None) -> None:
        db = self._get_db()
        await db.execute(
            "UPDATE users SET consent_given = ?, consent_date = COALESCE(?, consent_date) "
            "WHERE id = ?",
            (int(given), to_db_time(at) if given else None, user_id),
        )
        await db.commit()

    async def delete_user(self, user_id: str) -> bool:
        db = self._get_db()
        cursor = await db.execute("DELETE FROM users WHERE id = ?", (user_id,))
        await db.commit()
        return cursor.rowcount > 0

    # Reminders

    async def create_reminder(self, reminder: Reminder) -> str:
        db = self._get_db()
        await db.execute(
            f"INSERT INTO reminders ({_REMINDER_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                reminder.id,
                reminder.user_id,
                reminder.subject,
                to_db_time(reminder.scheduled_for),
                reminder.status.value,
                int(reminder.is_recurring),
                reminder.recurrence_type.value if reminder.recurrence_type else None,
                to_db_time(reminder.recurrence_end),
                reminder.original_text,
                to_db_time(reminder.delivered_at),
                to_db_time(reminder.cancelled_at),
                to_db_time(reminder.created_at),
            ),
        )
        await db.commit()
        return reminder.id

    async def get_reminder(self, reminder_id: str) -> Reminder | None:
        cursor = await self._get_db().execute(
            f"SELECT {_REMINDER_COLUMNS} FROM reminders WHERE id = ?",
            (reminder_id,),
        )
        row = await cursor.fetchone()
        return Reminder(**dict(row)) if row else None

    async def update_reminder_status(
        self,
        reminder_id: str,
        status: ReminderStatus,
        at: datetime,
        expected: ReminderStatus = ReminderStatus.PENDING,
        user_id: str | None = None,
    ) -> bool:
        """Move a reminder to a terminal status if it is still in ``expected``.

        Returns False when no row matched, which is how a losing concurrent
        writer finds out.
        """
        column = _STATUS_TIMESTAMP.get(status)
        if column is None:
            raise ValueError(f"Cannot transition a reminder to {status.value}")

        sql = (
            f"UPDATE reminders SET status = ?, {column} = ? "
            "WHERE id = ? AND status = ?"
        )
        params: list = [status.value, to_db_time(at), reminder_id, expected.value]
        if user_id is not None:
            sql += " AND user_id = ?"
            params.append(user_id)

        db = self._get_db()
        cursor = await db.execute(sql, params)
        await db.commit()
        return cursor.rowcount > 0

    async def find_pending_reminders(
        self,
        user_id: str | None = None,
        subject_contains: str | None = None,
        limit: int | None = None,
    ) -> list[Reminder]:
        sql = f"SELECT {_REMINDER_COLUMNS} FROM reminders WHERE status = ?"
        params: list = [ReminderStatus.PENDING.value]
        if user_id is not None:
            sql += " AND user_id = ?"
            params.append(user_id)
        if subject_contains:
            sql += " AND instr(lower(subject), lower(?)) > 0"
            params.append(subject_contains)
        sql += " ORDER BY created_at DESC, rowid DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        cursor = await self._get_db().execute(sql, params)
        rows = await cursor.fetchall()
        return [Reminder(**dict(r)) for r in rows]

    async def list_reminders(self, user_id: str, limit: int = 50) -> list[Reminder]:
        cursor = await self._get_db().execute(
            f"SELECT {_REMINDER_COLUMNS} FROM reminders WHERE user_id = ? "
            "ORDER BY scheduled_for ASC LIMIT ?",
            (user_id, limit),
        )
        rows = await cursor.fetchall()
        return [Reminder(**dict(r)) for r in rows]

    # Messages

    async def log_message(self, message: Message) -> str:
        db = self._get_db()
        await db.execute(
            f"INSERT INTO messages ({_MESSAGE_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                message.id,
                message.user_id,
                message.provider_message_id,
                message.thread_id,
                message.content,
                message.direction.value,
                message.intent,
                message.intent_data,
                to_db_time(message.created_at),
                to_db_time(message.expires_at),
            ),
        )
        await db.commit()
        return message.id

    async def set_message_intent(self, message_id: str, intent: str, intent_data: str) -> None:
        db = self._get_db()
        await db.execute(
            "UPDATE messages SET intent = ?, intent_data = ? WHERE id = ?",
            (intent, intent_data, message_id),
        )
        await db.commit()

    async def get_thread_messages(
        self,
        user_id: str,
        thread_id: str | None = None,
        limit: int = 50,
    ) -> list[Message]:
        """Most recent ``limit`` messages, returned oldest first."""
        sql = f"SELECT {_MESSAGE_COLUMNS} FROM messages WHERE user_id = ?"
        params: list = [user_id]
        if thread_id is not None:
            sql += " AND thread_id = ?"
            params.append(thread_id)
        sql += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(limit)

        cursor = await self._get_db().execute(sql, params)
        rows = await cursor.fetchall()
        return [Message(**dict(r)) for r in reversed(rows)]

    async def purge_expired_messages(self, now: datetime | None = None) -> int:
        now = now or datetime.now(timezone.utc)
        db = self._get_db()
        cursor = await db.execute(
            "DELETE FROM messages WHERE expires_at IS NOT NULL AND expires_at <= ?",
            (to_db_time(now),),
        )
        await db.commit()
        return cursor.rowcount
