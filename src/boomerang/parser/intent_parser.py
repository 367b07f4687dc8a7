"""Confidence-gated parsing cascade."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from loguru import logger

from boomerang.models.intent import ParseContext, ParsedIntent
from boomerang.parser.strategies.base import ParseStrategy

CONFIDENCE_THRESHOLD = 0.8


class IntentParser:
    """Runs parse tiers in order.

    A tier's result is accepted when its confidence reaches ``threshold``;
    the last tier's result is accepted as-is. A tier that raises is skipped.
    ``parse`` never raises: with no usable result it returns UNKNOWN.
    """

    def __init__(
        self,
        tiers: Sequence[ParseStrategy],
        threshold: float = CONFIDENCE_THRESHOLD,
    ) -> None:
        if not tiers:
            raise ValueError("IntentParser needs at least one tier")
        self._tiers = list(tiers)
        self._threshold = threshold

    @property
    def threshold(self) -> float:
        return self._threshold

    async def parse(
        self,
        text: str,
        context: ParseContext | None = None,
        now: datetime | None = None,
    ) -> ParsedIntent:
        if not text or not text.strip():
            return ParsedIntent.unknown(text or "")

        now = now or datetime.now().astimezone()
        last = len(self._tiers) - 1

        for index, tier in enumerate(self._tiers):
            try:
                intent = await tier.parse(text, context=context, now=now)
            except Exception as exc:
                logger.warning("Parse tier {} failed: {}", tier.name, exc)
                continue

            if index == last or intent.confidence >= self._threshold:
                return intent
            logger.debug(
                "Tier {} confidence {:.2f} below {:.2f}, falling through",
                tier.name,
                intent.confidence,
                self._threshold,
            )

        return ParsedIntent.unknown(text)
