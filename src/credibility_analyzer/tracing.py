"""Optional MLflow tracing for analysis calls.

Each analyze tool runs inside a ``TOOL`` span carrying the analysis variant;
the provider, content size and outcome are attached once they are known.
With the Gemini provider, ``mlflow.gemini.autolog()`` adds the SDK round
trips as child ``CHAT_MODEL`` spans. Pollinations calls are plain httpx
posts and show up only through the tool span.

Guarded import: the server runs fine without ``mlflow-tracing`` installed.
Whether tracing is on is decided per call, so decorating a function never
reads configuration.

Env vars (all optional):
    MLFLOW_TRACKING_URI: Where to store traces. Empty = tracing disabled.
    MLFLOW_EXPERIMENT_NAME: Experiment name (default ``credibility-analyzer``).
    ANALYZER_TRACING_ENABLED: Set to ``"false"`` to force-disable even with a URI.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

try:
    import mlflow
    import mlflow.gemini

    _HAS_MLFLOW = True
except ImportError:
    _HAS_MLFLOW = False

R = TypeVar("R")


def is_enabled() -> bool:
    """Return True when mlflow-tracing is installed and not explicitly disabled."""
    if not _HAS_MLFLOW:
        return False
    from .config import get_config

    return get_config().tracing_enabled


def trace(
    func: Callable[..., Awaitable[R]] | None = None,
    *,
    name: str | None = None,
    span_type: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable:
    """Trace an async analysis entry point as one MLflow span.

    The MLflow wrapper is built on the first call made while tracing is
    enabled; until then, and whenever tracing is off, the function runs
    untouched. The returned wrapper keeps the wrapped signature so FastMCP
    can still derive the tool schema from it.

    Usage::

        @trace(name="analyze_article", span_type="TOOL", attributes={"variant": "article"})
        async def analyze_article(...): ...
    """

    def decorator(fn: Callable[..., Awaitable[R]]) -> Callable[..., Awaitable[R]]:
        traced: Callable[..., Awaitable[R]] | None = None

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> R:
            nonlocal traced
            if not is_enabled():
                return await fn(*args, **kwargs)
            if traced is None:
                traced = mlflow.trace(
                    fn, name=name or fn.__name__, span_type=span_type, attributes=attributes,
                )
            return await traced(*args, **kwargs)

        return wrapper

    return decorator(func) if func is not None else decorator


def annotate_span(**attributes: Any) -> None:
    """Attach *attributes* to the active span, if tracing is on and a span is open."""
    if not is_enabled():
        return
    try:
        span = mlflow.get_current_active_span()
        if span is not None:
            span.set_attributes(attributes)
    except Exception:
        logger.debug("Could not annotate active span", exc_info=True)


def setup() -> None:
    """Configure MLflow tracking; autolog the Gemini SDK when it is the provider.

    No-op when disabled. Failures are logged; tracing never blocks startup.
    """
    if not is_enabled():
        return

    from .config import get_config

    cfg = get_config()
    try:
        mlflow.set_tracking_uri(cfg.mlflow_tracking_uri)
        mlflow.set_experiment(cfg.mlflow_experiment_name)
        if cfg.provider == "gemini":
            mlflow.gemini.autolog()
        logger.info(
            "MLflow tracing enabled (uri=%s, experiment=%s, provider=%s)",
            cfg.mlflow_tracking_uri, cfg.mlflow_experiment_name, cfg.provider,
        )
    except Exception:
        logger.warning("MLflow tracing setup failed, continuing without tracing", exc_info=True)


def shutdown() -> None:
    """Flush pending async traces. No-op when disabled."""
    if not is_enabled():
        return

    try:
        mlflow.flush_trace_async_logging()
        logger.info("MLflow traces flushed")
    except Exception:
        logger.warning("MLflow trace flush failed", exc_info=True)
