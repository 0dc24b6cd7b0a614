"""Logging setup shared by the API, the dispatcher and the scripts."""
from __future__ import annotations

import logging
import os
from logging.config import dictConfig
from pathlib import Path

from pydantic import ValidationError

from dao_notifications.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILENAME = "notifications.log"

_configured = False


def build_logging_config(log_dir: Path, level: str) -> dict:
    """dictConfig payload: console and file output, package logger at ``level``."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
            "file": {
                "class": "logging.FileHandler",
                "filename": str(log_dir / LOG_FILENAME),
                "encoding": "utf-8",
                "formatter": "standard",
            },
        },
        "loggers": {
            "dao_notifications": {"level": level},
            "scripts": {"level": level},
            # SQL echo is driven by DEBUG; keep the engine logger at WARNING.
            "sqlalchemy.engine": {"level": "WARNING"},
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console", "file"],
        },
    }


def configure_logging(level: str | None = None) -> None:
    """Install handlers once; ``level`` overrides LOG_LEVEL when given."""

    global _configured
    if _configured:
        return

    settings_error: ValidationError | None = None
    try:
        settings = get_settings()
        log_dir = settings.log_dir
        resolved_level = level or settings.log_level
    except ValidationError as err:
        settings_error = err
        log_dir = Path(os.environ.get("LOG_DIR") or "logs")
        resolved_level = level or "INFO"

    log_dir.mkdir(parents=True, exist_ok=True)
    dictConfig(build_logging_config(log_dir, resolved_level.upper()))
    _configured = True

    if settings_error is not None:
        logging.getLogger(__name__).warning(
            "Settings invalid, logging with defaults (%d error(s)): %s",
            settings_error.error_count(),
            settings_error,
        )
