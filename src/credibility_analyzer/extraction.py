"""Isolate the outermost JSON object in free-form model output.

Providers are told to answer with JSON only, but some wrap the object in
prose or markdown fences. A balanced scan finds the first complete object
without stopping at an inner ``}`` or swallowing trailing commentary that
happens to contain braces.
"""

from __future__ import annotations

import logging

from .errors import ErrorRecord, invalid_content

logger = logging.getLogger(__name__)


def _match_object(text: str, start: int) -> int:
    """Return the index of the ``}`` closing the ``{`` at *start*, or -1.

    Braces inside JSON string literals are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def extract_json_object(raw: str) -> str | ErrorRecord:
    """Return the first balanced ``{...}`` substring of *raw*, unparsed.

    When the scan from one opening brace never closes, scanning resumes
    from the next opening brace.
    """
    text = (raw or "").strip()
    start = text.find("{")
    while start != -1:
        end = _match_object(text, start)
        if end != -1:
            if start > 0 or end < len(text) - 1:
                logger.debug("Extracted JSON object at [%d:%d] of %d chars", start, end + 1, len(text))
            return text[start : end + 1]
        start = text.find("{", start + 1)

    logger.debug("No JSON object in response: %r", text[:200])
    return invalid_content("No JSON object found in analysis response")
