"""SQLite CREATE TABLE statements."""

from __future__ import annotations

TABLES: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        phone_number TEXT NOT NULL UNIQUE,
        consent_given INTEGER DEFAULT 0,
        consent_date TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS reminders (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        subject TEXT NOT NULL,
        scheduled_for TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'PENDING',
        is_recurring INTEGER DEFAULT 0,
        recurrence_type TEXT,
        recurrence_end TEXT,
        original_text TEXT,
        delivered_at TEXT,
        cancelled_at TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS messages (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        provider_message_id TEXT,
        thread_id TEXT,
        content TEXT NOT NULL,
        direction TEXT NOT NULL,
        intent TEXT,
        intent_data TEXT,
        created_at TEXT NOT NULL,
        expires_at TEXT,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_reminders_user_status ON reminders (user_id, status)",
    "CREATE INDEX IF NOT EXISTS idx_messages_user_thread ON messages (user_id, thread_id)",
    "CREATE INDEX IF NOT EXISTS idx_messages_expires ON messages (expires_at)",
]
