"""Shared type aliases for tool parameters."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

ContentParam = Annotated[str, Field(description="Text to analyze (at least 50 characters)")]
TitleParam = Annotated[str | None, Field(description="Article headline")]
UrlParam = Annotated[str | None, Field(description="Source URL of the article")]
LastEditedParam = Annotated[str | None, Field(description="ISO-8601 last-edited timestamp")]
