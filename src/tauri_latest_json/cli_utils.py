from __future__ import annotations

import re
from pathlib import Path

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")
_QUOTES = "\"'"


def sanitize_ansi_path(value: str) -> str:
    cleaned = _ANSI_RE.sub("", value).strip()
    if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in _QUOTES:
        cleaned = cleaned[1:-1].strip()
    return cleaned


def clean_path(value: Path | None) -> Path | None:
    if value is None:
        return None
    return Path(sanitize_ansi_path(str(value)))
