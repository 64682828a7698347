"""Bounded retry loop driven by ErrorClassifier verdicts."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .config import MAX_ATTEMPTS_LIMIT
from .errors import (
    MAX_BACKOFF_SECONDS,
    ErrorRecord,
    RecoveryStrategy,
    RecoveryVerdict,
    classify,
    on_exhaustion,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_HANDOFF_STRATEGIES = {RecoveryStrategy.FALLBACK, RecoveryStrategy.DEGRADE}


class RetryController:
    """Run one analysis call with at most three attempts.

    Each attempt either returns a value or an ErrorRecord. Failures are
    classified; the verdict decides between sleeping and retrying, handing
    off to a degrade callback, or surfacing the record. Failure history
    lives only for the duration of :meth:`run`.
    """

    def __init__(
        self,
        *,
        max_attempts: int = MAX_ATTEMPTS_LIMIT,
        base_delay: float = 1.0,
        max_delay: float = MAX_BACKOFF_SECONDS,
    ) -> None:
        self.max_attempts = max(1, min(max_attempts, MAX_ATTEMPTS_LIMIT))
        self.base_delay = base_delay
        self.max_delay = min(max_delay, MAX_BACKOFF_SECONDS)

    async def run(
        self,
        call: Callable[[int], Awaitable[T | ErrorRecord]],
        *,
        degrade: Callable[[ErrorRecord], T] | None = None,
    ) -> T | ErrorRecord:
        """Drive *call* until success, abort, or exhaustion.

        Args:
            call: Receives the 1-based attempt number; returns a value or an ErrorRecord.
            degrade: Builds a fallback value from the final record. Without it,
                fallback/degrade verdicts surface the record instead.

        Returns:
            The first successful value, a degraded value, or the final ErrorRecord.
        """
        history: list[ErrorRecord] = []
        for attempt in range(1, self.max_attempts + 1):
            outcome = await call(attempt)
            if not isinstance(outcome, ErrorRecord):
                if history:
                    logger.info(
                        "Attempt %d succeeded after %d failure(s): %s",
                        attempt, len(history), ", ".join(r.kind.value for r in history),
                    )
                return outcome

            record = outcome.at_attempt(attempt)
            history.append(record)
            verdict = classify(record, base_delay=self.base_delay)
            logger.warning(
                "Analysis attempt %d/%d failed: %s (severity=%s, strategy=%s, retryable=%s)",
                attempt, self.max_attempts, record, verdict.severity.value,
                verdict.strategy.value, verdict.retryable,
            )

            exhausted = attempt >= self.max_attempts
            if verdict.strategy == RecoveryStrategy.RETRY and verdict.retryable and not exhausted:
                delay = min(verdict.backoff_delay, self.max_delay)
                logger.warning(
                    "Retrying in %.1fs (attempt %d/%d)", delay, attempt + 1, self.max_attempts,
                )
                await asyncio.sleep(delay)
                continue

            if exhausted:
                verdict = on_exhaustion(record, verdict)
            return self._settle(record, verdict, degrade)

        raise AssertionError("unreachable: loop always returns")  # pragma: no cover

    def _settle(
        self,
        record: ErrorRecord,
        verdict: RecoveryVerdict,
        degrade: Callable[[ErrorRecord], T] | None,
    ) -> T | ErrorRecord:
        if verdict.strategy in _HANDOFF_STRATEGIES and degrade is not None:
            logger.warning("Attempting graceful degradation (%s) after %s", verdict.strategy.value, record.kind.value)
            return degrade(record)
        logger.error("Analysis failed after attempt %d: %s", record.attempt, record)
        return record
