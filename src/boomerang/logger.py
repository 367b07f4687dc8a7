"""Logging setup.

Call ``setup_logging`` once at startup, then log through ``loguru.logger``.
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level:<8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | "
    "{name}:{function}:{line} - {message}"
)

_LEVEL_ALIAS = {"FATAL": "CRITICAL", "WARN": "WARNING"}


def normalize_level(level: str) -> str:
    return _LEVEL_ALIAS.get(str(level).upper(), str(level).upper())


def setup_logging(
    log_level: str = "INFO",
    log_file: str | Path | None = None,
) -> None:
    level = normalize_level(log_level)
    handlers: list[dict] = [
        {
            "sink": sys.stderr,
            "level": level,
            "format": CONSOLE_FORMAT,
            "colorize": True,
        }
    ]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            {
                "sink": path,
                "level": level,
                "format": FILE_FORMAT,
                "rotation": "10 MB",
                "retention": "30 days",
                "encoding": "utf-8",
            }
        )
    logger.configure(handlers=handlers)


__all__ = ["setup_logging", "normalize_level", "logger"]
