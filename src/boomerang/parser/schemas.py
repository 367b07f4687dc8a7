"""JSON schema for structured LLM output."""

from __future__ import annotations

INTENT_JSON_SCHEMA: dict = {
    "name": "parsed_intent",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "type": {
                "type": "string",
                "enum": [
                    "REMINDER",
                    "SNOOZE",
                    "CANCEL",
                    "SUMMARIZE",
                    "OPT_IN",
                    "OPT_OUT",
                    "QUICK_REPLY",
                    "ASK",
                    "UNKNOWN",
                ],
                "description": "The classified intent type.",
            },
            "confidence": {
                "type": "number",
                "description": "Confidence score between 0.0 and 1.0.",
            },
            "data": {
                "type": "object",
                "properties": {
                    "subject": {
                        "type": ["string", "null"],
                        "description": "What the user wants to be reminded about.",
                    },
                    "scheduledFor": {
                        "type": ["string", "null"],
                        "description": "ISO 8601 datetime of the reminder.",
                    },
                    "snoozeMinutes": {
                        "type": ["integer", "null"],
                        "description": "Minutes to postpone the latest reminder.",
                    },
                    "recurrence": {
                        "type": ["string", "null"],
                        "enum": ["DAILY", "WEEKLY", "MONTHLY", None],
                        "description": "Repeat cadence, if any.",
                    },
                    "recurrenceEnd": {
                        "type": ["string", "null"],
                        "description": "ISO 8601 datetime after which repeats stop.",
                    },
                    "query": {
                        "type": ["string", "null"],
                        "description": "Question text for ASK intents.",
                    },
                },
                "required": [
                    "subject",
                    "scheduledFor",
                    "snoozeMinutes",
                    "recurrence",
                    "recurrenceEnd",
                    "query",
                ],
                "additionalProperties": False,
            },
        },
        "required": ["type", "confidence", "data"],
        "additionalProperties": False,
    },
}
