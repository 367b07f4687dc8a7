"""Prompt templates for LLM intent classification."""

from __future__ import annotations

INTENT_PROMPT_TEMPLATE = """\
You are an intent parser for a WhatsApp reminder assistant. Analyze the following \
message and extract the intent.

Current time: {now}
{context}

Message: "{text}"

Respond with a JSON object in this exact format:
{{
  "type": "REMINDER" | "SNOOZE" | "CANCEL" | "SUMMARIZE" | "OPT_IN" | "OPT_OUT" | "QUICK_REPLY" | "ASK" | "UNKNOWN",
  "confidence": 0.0-1.0,
  "data": {{
    "subject": "extracted reminder subject or null",
    "scheduledFor": "ISO 8601 datetime string or null",
    "snoozeMinutes": number or null,
    "recurrence": "DAILY" | "WEEKLY" | "MONTHLY" or null,
    "recurrenceEnd": "ISO 8601 datetime string or null",
    "query": "search/ask query or null"
  }}
}}

Examples:
- "Remind me tomorrow at 9am to call mom" -> {{"type": "REMINDER", "confidence": 0.95, "data": {{"subject": "call mom", "scheduledFor": "2025-12-01T09:00:00Z"}}}}
- "Snooze this for 30 minutes" -> {{"type": "SNOOZE", "confidence": 0.9, "data": {{"snoozeMinutes": 30}}}}
- "Cancel my reminder about rent" -> {{"type": "CANCEL", "confidence": 0.9, "data": {{"subject": "rent"}}}}
- "Every monday remind me to water the plants at 8am until june" -> {{"type": "REMINDER", "confidence": 0.8, "data": {{"subject": "water the plants", "scheduledFor": "2025-12-01T08:00:00Z", "recurrence": "WEEKLY", "recurrenceEnd": "2026-06-01T00:00:00Z"}}}}

Only respond with valid JSON, no other text.
"""

NO_CONTEXT = "No conversation context."
