"""Analysis models: requests, provider payloads, and stamped results.

Results serialise with camelCase aliases (``credibilityScore``,
``contentHash``) so the wire shape matches what clients already consume.
Payload models are deliberately lenient: they only check types and fill
defaults, leaving range and degeneracy checks to ``validation.py``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel

SHORT_CONCLUSIONS: tuple[str, ...] = ("fact", "false", "opinion", "none")


class Variant(str, Enum):
    """Supported analysis shapes."""

    ARTICLE = "article"
    LONG_TEXT = "long_text"
    SHORT_TEXT = "short_text"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Dump with wire aliases, omitting absent optional keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AnalysisRequest(BaseModel):
    """One analysis call as received from a caller."""

    content: str
    title: str | None = None
    url: str | None = None
    last_edited: datetime | None = None
    variant: Variant = Variant.ARTICLE


# ── Provider payloads (lenient) ──────────────────────────────────────────────


class Reasoning(_WireModel):
    factual: list[str] = Field(default_factory=list)
    unfactual: list[str] = Field(default_factory=list)
    subjective: list[str] = Field(default_factory=list)
    objective: list[str] = Field(default_factory=list)

    @field_validator("factual", "unfactual", "subjective", "objective", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return [] if value is None else value

    def is_empty(self) -> bool:
        return not (self.factual or self.unfactual or self.subjective or self.objective)


class CategoryScores(_WireModel):
    factuality: StrictInt = 0
    objectivity: StrictInt = 0


class AnalysisPayload(_WireModel):
    """Article / long-text payload as emitted by the provider."""

    reasoning: Reasoning = Field(default_factory=Reasoning)
    credibility_score: StrictInt = 0
    categories: CategoryScores = Field(default_factory=CategoryScores)
    confidence: StrictInt = 0
    sources: list[str | None] | None = None


class ShortConclusion(_WireModel):
    """Short-text verdict: exactly one key is expected to be populated."""

    fact: str | None = None
    false_: str | None = Field(default=None, alias="false")
    opinion: str | None = None
    none: str | None = None

    @field_validator("fact", "false_", "opinion", "none", mode="before")
    @classmethod
    def _join_lists(cls, value: object) -> object:
        if isinstance(value, list):
            value = " ".join(str(v) for v in value)
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def populated(self) -> list[str]:
        """Wire names of the conclusions that carry a value."""
        values = (self.fact, self.false_, self.opinion, self.none)
        return [name for name, value in zip(SHORT_CONCLUSIONS, values) if value is not None and value.strip()]


class ShortAnalysisPayload(_WireModel):
    analysis: ShortConclusion = Field(default_factory=ShortConclusion)
    confidence: StrictInt = 0
    sources: list[str | None] | None = None


# ── Stamped results ──────────────────────────────────────────────────────────

Score = Annotated[int, Field(ge=0, le=100)]


class _StampedResult(_WireModel):
    id: str = ""
    timestamp: datetime | None = None
    content_hash: str = ""
    confidence: Score
    sources: list[str] = Field(default_factory=list)
    degraded: bool = False


class Categories(_WireModel):
    factuality: Score
    objectivity: Score


class AnalysisResult(_StampedResult):
    """Credibility assessment for the article and long-text variants."""

    url: str = "unknown"
    title: str = "Untitled Content"
    reasoning: Reasoning = Field(default_factory=Reasoning)
    credibility_score: Score
    categories: Categories


class ShortAnalysisResult(_StampedResult):
    """Fact / false / opinion / none verdict for the short-text variant."""

    analysis: ShortConclusion
