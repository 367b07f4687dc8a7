"""Prompt templates for thread summaries and quick replies."""

from __future__ import annotations

SUMMARY_PROMPT_TEMPLATE = """\
You are a helpful assistant that summarizes WhatsApp conversation threads. Analyze \
the following conversation and provide:

1. A concise 1-2 sentence summary of the main topics discussed
2. Three bullet-point action items or key takeaways

Conversation:
{conversation}

Respond with a JSON object in this exact format:
{{
  "summary": "1-2 sentence summary",
  "actionItems": ["item 1", "item 2", "item 3"]
}}

Only respond with valid JSON, no other text.
"""

QUICK_REPLY_PROMPT_TEMPLATE = """\
You are a helpful assistant that suggests quick reply options for WhatsApp messages. \
Given the following message, suggest 1-3 short, friendly, and concise reply options \
(each under 50 characters).

Message: "{message}"

Respond with a JSON array of strings:
["reply option 1", "reply option 2", "reply option 3"]

Only respond with valid JSON array, no other text.
"""
