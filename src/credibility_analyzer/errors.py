"""Structured error handling: error kinds, classification, and recovery verdicts."""

from __future__ import annotations

from enum import Enum

import httpx
from pydantic import BaseModel

MAX_BACKOFF_SECONDS = 10.0


class ErrorKind(str, Enum):
    """Closed taxonomy of analysis failures."""

    RATE_LIMITED = "RATE_LIMITED"
    API_UNAVAILABLE = "API_UNAVAILABLE"
    INVALID_CONTENT = "INVALID_CONTENT"
    NETWORK_ERROR = "NETWORK_ERROR"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RecoveryStrategy(str, Enum):
    RETRY = "retry"
    FALLBACK = "fallback"
    DEGRADE = "degrade"
    ABORT = "abort"


class ErrorRecord(BaseModel):
    """A classified failure returned (never raised) by pipeline components."""

    kind: ErrorKind
    message: str
    retryable: bool = False
    user_message: str = ""
    attempt: int = 0
    status_code: int | None = None

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    def at_attempt(self, attempt: int) -> ErrorRecord:
        """Return a copy stamped with *attempt*."""
        return self.model_copy(update={"attempt": attempt})

    def to_tool_error(self) -> dict:
        """Create a serialisable error dict for tool and HTTP responses."""
        return {
            "error": self.message,
            "kind": self.kind.value,
            "user_message": self.user_message,
            "retryable": self.retryable,
        }


class RecoveryVerdict(BaseModel):
    """Retry/fallback decision computed from one ErrorRecord."""

    severity: Severity
    strategy: RecoveryStrategy
    retryable: bool
    backoff_delay: float = 0.0


# ── Record constructors ──────────────────────────────────────────────────────


def invalid_content(message: str, *, retryable: bool = True, user_message: str = "") -> ErrorRecord:
    """InvalidContent record; retryable by default because generation is non-deterministic."""
    return ErrorRecord(
        kind=ErrorKind.INVALID_CONTENT,
        message=message,
        retryable=retryable,
        user_message=user_message or "Try analyzing the content again",
    )


def missing_credential(provider: str, env_var: str) -> ErrorRecord:
    return ErrorRecord(
        kind=ErrorKind.API_UNAVAILABLE,
        message=f"{provider} API key is missing",
        retryable=False,
        user_message=f"Please set {env_var} in your environment",
    )


def from_http_status(status: int, message: str = "", *, attempt: int = 0) -> ErrorRecord:
    """Map an HTTP status code to an ErrorRecord."""
    if status == 429:
        return ErrorRecord(
            kind=ErrorKind.RATE_LIMITED,
            message="API rate limit exceeded",
            retryable=True,
            user_message="Please wait a moment before trying again",
            attempt=attempt,
            status_code=status,
        )
    if status >= 500:
        return ErrorRecord(
            kind=ErrorKind.API_UNAVAILABLE,
            message="Analysis service is temporarily unavailable",
            retryable=True,
            user_message="Please try again in a few minutes",
            attempt=attempt,
            status_code=status,
        )
    if status == 404:
        return ErrorRecord(
            kind=ErrorKind.API_UNAVAILABLE,
            message="API endpoint not found (404)",
            retryable=False,
            user_message="Using fallback analysis method",
            attempt=attempt,
            status_code=status,
        )
    if status == 400:
        return ErrorRecord(
            kind=ErrorKind.INVALID_CONTENT,
            message="Invalid request format or content",
            retryable=False,
            user_message="Please try with different content or check your input",
            attempt=attempt,
            status_code=status,
        )
    if 400 <= status < 500:
        return ErrorRecord(
            kind=ErrorKind.API_UNAVAILABLE,
            message=f"API request failed with status {status}",
            retryable=False,
            user_message="Please check your request and try again",
            attempt=attempt,
            status_code=status,
        )
    return ErrorRecord(
        kind=ErrorKind.NETWORK_ERROR,
        message=message or f"Unexpected response status {status}",
        retryable=True,
        user_message="Please check your internet connection and try again",
        attempt=attempt,
        status_code=status,
    )


def from_exception(error: BaseException, *, attempt: int = 0) -> ErrorRecord:
    """Map a transport-level exception to an ErrorRecord."""
    if isinstance(error, (httpx.TimeoutException, TimeoutError)):
        message = "Request timed out"
    elif isinstance(error, (httpx.TransportError, OSError)):
        message = f"Network request failed: {error}"
    else:
        message = f"Unclassified transport failure: {error}"
    return ErrorRecord(
        kind=ErrorKind.NETWORK_ERROR,
        message=message,
        retryable=True,
        user_message="Please check your internet connection and try again",
        attempt=attempt,
    )


# ── Verdicts ─────────────────────────────────────────────────────────────────


def backoff_delay(attempt: int, base_delay: float = 1.0) -> float:
    """Exponential backoff for *attempt* (1-based), capped at MAX_BACKOFF_SECONDS."""
    exponent = max(attempt, 1) - 1
    return min(base_delay * (2 ** exponent), MAX_BACKOFF_SECONDS)


def classify(record: ErrorRecord, *, base_delay: float = 1.0) -> RecoveryVerdict:
    """Compute the recovery verdict for *record*. Pure and deterministic."""
    delay = backoff_delay(record.attempt, base_delay)

    if record.kind == ErrorKind.RATE_LIMITED:
        return RecoveryVerdict(
            severity=Severity.MEDIUM,
            strategy=RecoveryStrategy.RETRY,
            retryable=True,
            backoff_delay=delay,
        )

    if record.kind == ErrorKind.API_UNAVAILABLE:
        if record.status_code == 404:
            return RecoveryVerdict(
                severity=Severity.MEDIUM,
                strategy=RecoveryStrategy.FALLBACK,
                retryable=False,
            )
        if record.retryable:
            return RecoveryVerdict(
                severity=Severity.HIGH,
                strategy=RecoveryStrategy.RETRY,
                retryable=True,
                backoff_delay=delay,
            )
        # Missing credential or a client-caused 4xx
        return RecoveryVerdict(
            severity=Severity.CRITICAL if record.status_code is None else Severity.MEDIUM,
            strategy=RecoveryStrategy.ABORT,
            retryable=False,
        )

    if record.kind == ErrorKind.INVALID_CONTENT:
        if record.retryable:
            return RecoveryVerdict(
                severity=Severity.LOW,
                strategy=RecoveryStrategy.RETRY,
                retryable=True,
                backoff_delay=delay,
            )
        return RecoveryVerdict(
            severity=Severity.MEDIUM,
            strategy=RecoveryStrategy.ABORT,
            retryable=False,
        )

    return RecoveryVerdict(
        severity=Severity.MEDIUM,
        strategy=RecoveryStrategy.RETRY,
        retryable=True,
        backoff_delay=delay,
    )


_SERVICE_SIDE_KINDS = {
    ErrorKind.RATE_LIMITED,
    ErrorKind.API_UNAVAILABLE,
    ErrorKind.NETWORK_ERROR,
}


def on_exhaustion(record: ErrorRecord, verdict: RecoveryVerdict) -> RecoveryVerdict:
    """Verdict to act on once no attempts remain.

    Service-side failures still under a retry strategy escalate to DEGRADE;
    a model that kept returning unusable content escalates to ABORT.
    """
    if verdict.strategy != RecoveryStrategy.RETRY:
        return verdict
    if record.kind in _SERVICE_SIDE_KINDS:
        strategy = RecoveryStrategy.DEGRADE
    else:
        strategy = RecoveryStrategy.ABORT
    return verdict.model_copy(update={"strategy": strategy, "retryable": False, "backoff_delay": 0.0})
