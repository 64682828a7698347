"""Auto-load environment variables from ``.env`` files.

Looks at ``./.env`` first, then the shared
``~/.config/credibility-analyzer/.env``. Variables already set in the
process environment are never overridden. No external dependencies.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "credibility-analyzer" / ".env"
LOCAL_ENV_NAME = ".env"


def _is_unset_or_placeholder(key: str, value: str | None) -> bool:
    """Return True when the current env value should be treated as unset.

    Blank values and unresolved self-placeholders (``${GEMINI_API_KEY}``)
    count as unset.
    """
    if value is None:
        return True

    normalized = value.strip()
    if len(normalized) >= 2 and normalized[0] == normalized[-1] and normalized[0] in ('"', "'"):
        normalized = normalized[1:-1].strip()
    if not normalized:
        return True

    if normalized in {f"${key}", f"${{{key}}}"}:
        return True
    return normalized.startswith(f"${{{key}:-") and normalized.endswith("}")


def parse_dotenv(path: Path) -> dict[str, str]:
    """Parse a ``.env`` file into a dict of key-value pairs.

    Supports ``KEY=VALUE``, quoted values, ``export KEY=VALUE``, blank
    lines, and ``#`` comments. No variable expansion.
    """
    result: dict[str, str] = {}
    if not path.is_file():
        return result

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]
        if key:
            result[key] = value
    return result


def _default_paths() -> list[Path]:
    return [Path.cwd() / LOCAL_ENV_NAME, DEFAULT_ENV_PATH]


def load_dotenv(path: Path | None = None) -> dict[str, str]:
    """Load vars into ``os.environ`` where the existing value is unset.

    Args:
        path: A single ``.env`` file. Defaults to ``./.env`` followed by
              :data:`DEFAULT_ENV_PATH`; earlier files win.

    Returns:
        Dict of vars that were actually injected.
    """
    paths = [path] if path is not None else _default_paths()
    injected: dict[str, str] = {}
    for env_path in paths:
        for key, value in parse_dotenv(env_path).items():
            if key in injected:
                continue
            if _is_unset_or_placeholder(key, os.environ.get(key)):
                os.environ[key] = value
                injected[key] = value
    return injected
