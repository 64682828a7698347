"""FastMCP server: analysis tools plus the plain HTTP endpoints."""

from __future__ import annotations

import argparse
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from . import tracing
from .config import get_config
from .errors import ErrorKind, ErrorRecord, invalid_content
from .models.analysis import AnalysisRequest, Variant
from .orchestrator import AnalysisOrchestrator
from .tracing import trace
from .types import ContentParam, LastEditedParam, TitleParam, UrlParam

logger = logging.getLogger(__name__)

_orchestrator: AnalysisOrchestrator | None = None


def get_orchestrator() -> AnalysisOrchestrator:
    """Return the process orchestrator, built once from the process config."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = AnalysisOrchestrator(get_config())
        logger.info("Using provider: %s", _orchestrator.provider.name)
    return _orchestrator


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook; closes the provider client and flushes traces."""
    tracing.setup()
    yield {}
    if _orchestrator is not None:
        aclose = getattr(_orchestrator.provider, "aclose", None)
        if aclose is not None:
            await aclose()
    tracing.shutdown()
    logger.info("Lifespan shutdown complete")


app = FastMCP(
    "credibility-analyzer",
    instructions=(
        "Credibility analysis for articles, long passages, and short claims. "
        "Returns scored assessments with reasoning and cited sources."
    ),
    lifespan=_lifespan,
)


def _parse_last_edited(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _health_payload() -> dict:
    return {
        "message": "Server is running successfully!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def _to_payload(outcome) -> dict:
    if isinstance(outcome, ErrorRecord):
        return outcome.to_tool_error()
    return outcome.to_wire()


async def _run_tool(request: AnalysisRequest) -> dict:
    orchestrator = get_orchestrator()
    tracing.annotate_span(provider=orchestrator.provider.name, content_length=len(request.content))
    outcome = await orchestrator.analyze(request)
    if isinstance(outcome, ErrorRecord):
        tracing.annotate_span(error_kind=outcome.kind.value, attempt=outcome.attempt)
    else:
        tracing.annotate_span(degraded=outcome.degraded)
    return _to_payload(outcome)


# ── MCP tools ────────────────────────────────────────────────────────────────


@app.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="analyze_article", span_type="TOOL", attributes={"variant": Variant.ARTICLE.value})
async def analyze_article(
    content: ContentParam,
    title: TitleParam = None,
    url: UrlParam = None,
    last_edited: LastEditedParam = None,
) -> dict:
    """Assess a news article's credibility, factuality, and objectivity.

    Args:
        content: Article body text.
        title: Headline, checked against the body for accuracy.
        url: Source URL; part of the returned content hash.
        last_edited: ISO-8601 timestamp of the last edit.

    Returns:
        Dict with reasoning, credibilityScore, categories, confidence,
        sources, id, timestamp, and contentHash, or an error dict.
    """
    try:
        edited = _parse_last_edited(last_edited)
    except ValueError:
        return invalid_content(
            f"Invalid last_edited timestamp: {last_edited!r}", retryable=False,
            user_message="Provide last_edited as an ISO-8601 timestamp",
        ).to_tool_error()
    return await _run_tool(AnalysisRequest(
        content=content, title=title, url=url, last_edited=edited, variant=Variant.ARTICLE,
    ))


@app.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="analyze_text_long", span_type="TOOL", attributes={"variant": Variant.LONG_TEXT.value})
async def analyze_text_long(content: ContentParam) -> dict:
    """Assess a long passage of text with a full scored breakdown."""
    return await _run_tool(AnalysisRequest(content=content, variant=Variant.LONG_TEXT))


@app.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
@trace(name="analyze_text_short", span_type="TOOL", attributes={"variant": Variant.SHORT_TEXT.value})
async def analyze_text_short(content: ContentParam) -> dict:
    """Classify a short claim as fact, false, opinion, or none."""
    return await _run_tool(AnalysisRequest(content=content, variant=Variant.SHORT_TEXT))


@app.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=False))
async def health() -> dict:
    """Liveness check."""
    return _health_payload()


# ── HTTP endpoints ───────────────────────────────────────────────────────────

_ROUTE_VARIANTS = {
    "/analyze/article": Variant.ARTICLE,
    "/analyze/text/short": Variant.SHORT_TEXT,
    "/analyze/text/long": Variant.LONG_TEXT,
}


def error_status(record: ErrorRecord) -> int:
    """HTTP status for a failed analysis."""
    if record.kind == ErrorKind.INVALID_CONTENT and not record.retryable:
        return 400
    if record.kind == ErrorKind.RATE_LIMITED:
        return 429
    return 503


def _bad_request() -> tuple[int, dict]:
    return 400, {"success": False, "error": "Invalid request body"}


async def handle_analysis(variant: Variant, body: object) -> tuple[int, dict]:
    """Run one analysis for an HTTP body; returns ``(status, envelope)``."""
    if not isinstance(body, dict):
        return _bad_request()
    content = body.get("content")
    if content is None:
        content = ""
    if not isinstance(content, str):
        return _bad_request()

    fields: dict = {"content": content, "variant": variant}
    if variant == Variant.ARTICLE:
        title, url = body.get("title"), body.get("url")
        if not isinstance(title, (str, type(None))) or not isinstance(url, (str, type(None))):
            return _bad_request()
        try:
            edited = _parse_last_edited(body.get("last_edited"))
        except (TypeError, ValueError, AttributeError):
            return _bad_request()
        fields.update(title=title, url=url, last_edited=edited)

    outcome = await get_orchestrator().analyze(AnalysisRequest(**fields))
    if isinstance(outcome, ErrorRecord):
        return error_status(outcome), {
            "success": False,
            "error": {
                "message": "AI analysis failed",
                "kind": outcome.kind.value,
                "error": str(outcome),
                "userMessage": outcome.user_message,
            },
        }
    return 200, {"success": True, "data": outcome.to_wire()}


async def _analysis_route(request: Request) -> JSONResponse:
    variant = _ROUTE_VARIANTS[request.url.path]
    try:
        body = await request.json()
    except ValueError:
        status, envelope = _bad_request()
        return JSONResponse(envelope, status_code=status)
    status, envelope = await handle_analysis(variant, body)
    return JSONResponse(envelope, status_code=status)


for _path in _ROUTE_VARIANTS:
    app.custom_route(_path, methods=["POST"])(_analysis_route)


@app.custom_route("/health", methods=["GET"])
async def health_route(request: Request) -> JSONResponse:
    return JSONResponse({"success": True, "data": _health_payload()})


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="credibility-analyzer")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--transport", choices=["http", "stdio"], default="http")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Entry-point for the ``credibility-analyzer`` console script."""
    args = _parse_args(argv)
    try:
        cfg = get_config()
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else cfg.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if cfg.provider == "gemini" and not cfg.gemini_api_key:
        raise SystemExit("GEMINI_API_KEY is not set. Please set it to use the Gemini provider.")
    get_orchestrator()

    if args.transport == "stdio":
        app.run()
        return

    port = args.port or cfg.port
    logger.info("Server starting on %s:%d", args.host, port)
    app.run(
        transport="http",
        host=args.host,
        port=port,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["*"],
                allow_methods=["POST", "GET", "OPTIONS"],
                allow_headers=["Content-Type"],
            ),
        ],
    )


if __name__ == "__main__":
    main()
