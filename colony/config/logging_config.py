from __future__ import annotations

import logging
import os
from logging.config import dictConfig
from typing import Any

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _logging_dict(level: str) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "colony": {"format": LOG_FORMAT},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "colony",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {
            "level": level,
            "handlers": ["stdout"],
        },
    }


def configure_logging(level_name: str | int | None = None) -> None:
    """Send controller logs to stdout at the given level.

    Accepts a level name or number; falls back to LOG_LEVEL, then INFO.
    Unknown names also mean INFO.
    """
    if level_name is None:
        level_name = os.getenv("LOG_LEVEL", "INFO")

    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
    else:
        level = level_name

    dictConfig(_logging_dict(logging.getLevelName(level)))
