"""Load environment variables from the annotator's shared config file.

Reads ``~/.config/video-annotator-mcp/.env`` and injects values that are
not already set in the process environment. No external dependencies.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "video-annotator-mcp" / ".env"


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def _is_unset(key: str, value: str | None) -> bool:
    """Return True when the current env value should be treated as unset.

    Blank values and unresolved self-references such as ``${GEMINI_API_KEY}``
    count as unset.
    """
    if value is None:
        return True
    normalized = _strip_quotes(value.strip()).strip()
    if not normalized:
        return True
    return normalized in {f"${key}", f"${{{key}}}"}


def parse_dotenv(path: Path) -> dict[str, str]:
    """Parse a ``.env`` file into a dict.

    Supports ``KEY=VALUE``, quoted values, ``export`` prefixes, blank lines
    and ``#`` comments. No variable expansion.
    """
    result: dict[str, str] = {}
    if not path.is_file():
        return result

    for raw in path.read_text().splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        result[key] = _strip_quotes(value.strip())
    return result


def load_dotenv(path: Path | None = None) -> dict[str, str]:
    """Inject vars from *path* into ``os.environ`` where they are unset.

    Args:
        path: The ``.env`` file. Defaults to :data:`DEFAULT_ENV_PATH`.

    Returns:
        Dict of the vars that were actually injected.
    """
    parsed = parse_dotenv(path if path is not None else DEFAULT_ENV_PATH)
    injected: dict[str, str] = {}
    for key, value in parsed.items():
        if _is_unset(key, os.environ.get(key)):
            os.environ[key] = value
            injected[key] = value
    return injected
