"""Graceful degradation: input shaping and synthetic fallback results."""

from __future__ import annotations

import logging
import re

from .models.analysis import (
    AnalysisResult,
    Categories,
    Reasoning,
    ShortAnalysisResult,
    ShortConclusion,
    Variant,
)

logger = logging.getLogger(__name__)

DEGRADED_NOTICE = (
    "Analysis service unavailable: this is a degraded placeholder result "
    "and no real credibility assessment was performed."
)
FALLBACK_SCORE = 50
FALLBACK_CONFIDENCE = 10

_SENTENCE_END = re.compile(r"[.!?](?=\s)")
_MIN_KEEP_RATIO = 0.8


class DegradationService:
    """Shapes oversized input and builds clearly-marked fallback results."""

    def __init__(self, *, truncate_threshold: int = 5000, truncate_length: int = 4000) -> None:
        self.truncate_threshold = truncate_threshold
        self.truncate_length = min(truncate_length, truncate_threshold)

    def truncate(self, content: str) -> str:
        """Cut *content* to at most ``truncate_length`` chars when oversized.

        Prefers the last sentence end, then the last whitespace, inside the
        window, as long as that keeps most of it. Deterministic, and
        idempotent because the output never exceeds the bound.
        """
        if len(content) <= self.truncate_threshold:
            return content

        window = content[: self.truncate_length]
        floor = int(self.truncate_length * _MIN_KEEP_RATIO)

        cut = -1
        for match in _SENTENCE_END.finditer(window):
            cut = match.end()
        if cut < floor:
            cut = window.rfind(" ") if window.rfind(" ") >= floor else len(window)

        truncated = window[:cut].rstrip()
        logger.info("Truncated content from %d to %d chars", len(content), len(truncated))
        return truncated

    def fallback_result(self, variant: Variant, reason: str) -> AnalysisResult | ShortAnalysisResult:
        """Build a synthetic result that cannot be mistaken for a real one."""
        logger.warning("Returning degraded %s result: %s", variant.value, reason)
        if variant == Variant.SHORT_TEXT:
            return ShortAnalysisResult(
                analysis=ShortConclusion(none=f"{DEGRADED_NOTICE} {reason}"),
                confidence=FALLBACK_CONFIDENCE,
                sources=[],
                degraded=True,
            )
        return AnalysisResult(
            reasoning=Reasoning(objective=[DEGRADED_NOTICE, reason]),
            credibility_score=FALLBACK_SCORE,
            categories=Categories(factuality=FALLBACK_SCORE, objectivity=FALLBACK_SCORE),
            confidence=FALLBACK_CONFIDENCE,
            sources=[],
            degraded=True,
        )
