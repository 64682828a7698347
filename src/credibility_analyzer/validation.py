"""Semantic validation for provider analysis payloads.

Checks that go beyond JSON well-formedness: degenerate non-answers,
score ranges, short-verdict exclusivity, and source normalisation.
Every failure is a retryable INVALID_CONTENT record, since a fresh
generation for the same request may well succeed.
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from .errors import ErrorRecord, invalid_content
from .models.analysis import (
    AnalysisPayload,
    AnalysisResult,
    Categories,
    Reasoning,
    ShortAnalysisPayload,
    ShortAnalysisResult,
)

logger = logging.getLogger(__name__)

SCORE_MIN = 0
SCORE_MAX = 100


def normalize_sources(sources: list[str | None] | None) -> list[str]:
    """Drop blank citations; a missing list becomes empty."""
    if not sources:
        return []
    return [s.strip() for s in sources if s and s.strip()]


def _clean_reasoning(reasoning: Reasoning) -> Reasoning:
    return Reasoning(
        factual=[r for r in reasoning.factual if r.strip()],
        unfactual=[r for r in reasoning.unfactual if r.strip()],
        subjective=[r for r in reasoning.subjective if r.strip()],
        objective=[r for r in reasoning.objective if r.strip()],
    )


def _parse(text: str) -> dict | ErrorRecord:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        logger.debug("Failed to parse analysis response: %s", exc)
        return invalid_content("Failed to parse analysis response")
    if not isinstance(data, dict):
        return invalid_content("Analysis response is not a JSON object")
    return data


def is_degenerate(payload: AnalysisPayload) -> bool:
    """True when every score is zero and every reasoning list is empty."""
    return (
        payload.credibility_score == 0
        and payload.categories.factuality == 0
        and payload.categories.objectivity == 0
        and payload.confidence == 0
        and payload.reasoning.is_empty()
    )


def score_issues(payload: AnalysisPayload) -> list[str]:
    """Return one issue per score outside [0, 100] (empty = all valid)."""
    issues: list[str] = []
    checks = (
        ("credibility score", payload.credibility_score),
        ("confidence score", payload.confidence),
        ("factuality category", payload.categories.factuality),
        ("objectivity category", payload.categories.objectivity),
    )
    for label, value in checks:
        if not SCORE_MIN <= value <= SCORE_MAX:
            issues.append(f"Invalid {label} in response: {value}")
    return issues


def validate_analysis(text: str) -> AnalysisResult | ErrorRecord:
    """Validate an article / long-text payload and normalise it.

    Returns an unstamped AnalysisResult, or an INVALID_CONTENT record.
    """
    data = _parse(text)
    if isinstance(data, ErrorRecord):
        return data
    try:
        payload = AnalysisPayload.model_validate(data)
    except ValidationError as exc:
        logger.debug("Analysis payload has wrong field types: %s", exc)
        return invalid_content("Analysis response has invalid field types")

    if is_degenerate(payload):
        return invalid_content("Invalid response format from analysis service")

    issues = score_issues(payload)
    if issues:
        logger.debug("Score range issues: %s", issues)
        return invalid_content(issues[0])

    return AnalysisResult(
        reasoning=_clean_reasoning(payload.reasoning),
        credibility_score=payload.credibility_score,
        categories=Categories(
            factuality=payload.categories.factuality,
            objectivity=payload.categories.objectivity,
        ),
        confidence=payload.confidence,
        sources=normalize_sources(payload.sources),
    )


def validate_short_analysis(text: str) -> ShortAnalysisResult | ErrorRecord:
    """Validate a short-text payload and normalise it.

    Exactly one of ``fact``, ``false``, ``opinion`` or ``none`` must be set.
    """
    data = _parse(text)
    if isinstance(data, ErrorRecord):
        return data
    try:
        payload = ShortAnalysisPayload.model_validate(data)
    except ValidationError as exc:
        logger.debug("Short analysis payload has wrong field types: %s", exc)
        return invalid_content("Analysis response has invalid field types")

    populated = payload.analysis.populated()
    if not populated:
        return invalid_content("No analysis conclusion in response")

    if not SCORE_MIN <= payload.confidence <= SCORE_MAX:
        return invalid_content(f"Invalid confidence score in response: {payload.confidence}")

    if len(populated) > 1:
        return invalid_content(f"Multiple analysis conclusions: {', '.join(populated)}")

    return ShortAnalysisResult(
        analysis=payload.analysis,
        confidence=payload.confidence,
        sources=normalize_sources(payload.sources),
    )
