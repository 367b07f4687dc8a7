"""Rule tier: wraps the synchronous RuleMatcher."""

from __future__ import annotations

from datetime import datetime

from boomerang.models.intent import ParseContext, ParsedIntent
from boomerang.parser.rules import RuleMatcher
from boomerang.parser.strategies.base import ParseStrategy


def normalize(text: str) -> str:
    return text.strip().lower()


class RuleStrategy(ParseStrategy):
    name = "rules"

    def __init__(self, matcher: RuleMatcher | None = None) -> None:
        self._matcher = matcher or RuleMatcher()

    async def parse(
        self,
        text: str,
        context: ParseContext | None = None,
        now: datetime | None = None,
    ) -> ParsedIntent:
        return self._matcher.match(normalize(text), text, now=now)
