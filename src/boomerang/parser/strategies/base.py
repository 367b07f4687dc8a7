"""Abstract base for parse tiers."""

from __future__ import annotations

import abc
from datetime import datetime

from boomerang.models.intent import ParseContext, ParsedIntent


class ParseStrategy(abc.ABC):
    name: str = "strategy"

    @abc.abstractmethod
    async def parse(
        self,
        text: str,
        context: ParseContext | None = None,
        now: datetime | None = None,
    ) -> ParsedIntent:
        ...  # pragma: no cover
