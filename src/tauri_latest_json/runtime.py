from __future__ import annotations

import logging
import os

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def log_level_from_env(default: int = logging.INFO) -> int:
    value = os.getenv("LATEST_JSON_LOG_LEVEL", "").strip().lower()
    if not value:
        return default
    if value not in _LEVELS:
        raise ValueError(f"LATEST_JSON_LOG_LEVEL is invalid: {value}")
    return _LEVELS[value]


def configure_logging(level: int | None = None) -> None:
    level = log_level_from_env() if level is None else level
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
