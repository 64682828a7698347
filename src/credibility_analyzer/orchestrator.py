"""Analysis façade: input checks, truncation, retries, and result stamping."""

from __future__ import annotations

import hashlib
import logging
import re
import time
import uuid
from datetime import datetime, timezone
from functools import partial

from .config import AnalyzerConfig, get_config
from .degradation import DegradationService
from .errors import ErrorRecord, invalid_content
from .extraction import extract_json_object
from .models.analysis import AnalysisRequest, AnalysisResult, ShortAnalysisResult, Variant
from .prompts.analysis import build_prompts
from .providers import Provider, make_provider
from .retry import RetryController
from .validation import validate_analysis, validate_short_analysis

logger = logging.getLogger(__name__)

AnyResult = AnalysisResult | ShortAnalysisResult

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WHITESPACE = re.compile(r"\s+")


def normalize_content(text: str) -> str:
    """Strip control characters and collapse whitespace runs to single spaces."""
    return _WHITESPACE.sub(" ", _CONTROL_CHARS.sub("", text)).strip()


def content_hash(content: str, url: str) -> str:
    """Deterministic fingerprint of ``(content, url)`` for client-side dedup."""
    return hashlib.sha256(f"{url}\n{content}".encode()).hexdigest()


def new_analysis_id() -> str:
    return f"analysis_{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"


class AnalysisOrchestrator:
    """Entry point for one credibility analysis per call.

    The provider is resolved once from the injected config; nothing is
    shared between calls except that read-only provider and config.
    """

    def __init__(
        self,
        config: AnalyzerConfig | None = None,
        *,
        provider: Provider | None = None,
        controller: RetryController | None = None,
        degradation: DegradationService | None = None,
    ) -> None:
        self.config = config or get_config()
        self.provider = provider or make_provider(self.config)
        self.controller = controller or RetryController(
            max_attempts=self.config.retry_max_attempts,
            base_delay=self.config.retry_base_delay,
            max_delay=self.config.retry_max_delay,
        )
        self.degradation = degradation or DegradationService(
            truncate_threshold=self.config.truncate_threshold,
            truncate_length=self.config.truncate_length,
        )

    async def analyze(self, request: AnalysisRequest) -> AnyResult | ErrorRecord:
        """Run the full pipeline for *request*.

        Returns:
            A stamped AnalysisResult / ShortAnalysisResult (possibly degraded),
            or the ErrorRecord that ended the call.
        """
        if not request.content or not request.content.strip():
            return invalid_content(
                "Text content cannot be empty",
                retryable=False,
                user_message="Please provide valid content to analyze",
            )

        content = normalize_content(request.content)
        minimum = self.config.min_content_length
        if len(content) < minimum:
            return invalid_content(
                "Text content is too short for analysis",
                retryable=False,
                user_message=f"Please provide at least {minimum} characters of content",
            )

        prompt_content = self.degradation.truncate(content)
        system_prompt, user_prompt = build_prompts(request.variant, prompt_content, request.title)
        logger.info(
            "Analyzing %s (%d chars) with %s", request.variant.value, len(prompt_content), self.provider.name,
        )

        outcome = await self.controller.run(
            partial(self._attempt, request.variant, system_prompt, user_prompt),
            degrade=lambda record: self.degradation.fallback_result(
                request.variant, f"API service unavailable: {record.message}",
            ),
        )
        if isinstance(outcome, ErrorRecord):
            return outcome
        return self._stamp(outcome, content, request)

    async def _attempt(
        self, variant: Variant, system_prompt: str, user_prompt: str, attempt: int,
    ) -> AnyResult | ErrorRecord:
        logger.debug("Attempt %d: calling %s", attempt, self.provider.name)
        raw = await self.provider.complete(system_prompt, user_prompt)
        if isinstance(raw, ErrorRecord):
            return raw
        extracted = extract_json_object(raw)
        if isinstance(extracted, ErrorRecord):
            return extracted
        if variant == Variant.SHORT_TEXT:
            return validate_short_analysis(extracted)
        return validate_analysis(extracted)

    def _stamp(self, result: AnyResult, content: str, request: AnalysisRequest) -> AnyResult:
        url = request.url or "unknown"
        update: dict = {
            "id": new_analysis_id(),
            "timestamp": datetime.now(timezone.utc),
            "content_hash": content_hash(content, url),
        }
        if isinstance(result, AnalysisResult):
            update["url"] = url
            update["title"] = request.title or "Untitled Content"
        return result.model_copy(update=update)

    async def analyze_article(
        self,
        content: str,
        *,
        title: str | None = None,
        url: str | None = None,
        last_edited: datetime | None = None,
    ) -> AnyResult | ErrorRecord:
        return await self.analyze(AnalysisRequest(
            content=content, title=title, url=url, last_edited=last_edited, variant=Variant.ARTICLE,
        ))

    async def analyze_text_long(self, content: str) -> AnyResult | ErrorRecord:
        return await self.analyze(AnalysisRequest(content=content, variant=Variant.LONG_TEXT))

    async def analyze_text_short(self, content: str) -> AnyResult | ErrorRecord:
        return await self.analyze(AnalysisRequest(content=content, variant=Variant.SHORT_TEXT))
