"""Logging configuration helpers."""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any

from .config import LoggingSettings

PACKAGE_LOGGER = "mailrender"


class StructuredFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _formatter_config(structured: bool) -> dict[str, Any]:
    if structured:
        return {"()": StructuredFormatter}
    return {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"}


def configure_logging(settings: LoggingSettings) -> None:
    """Route log records to stderr according to ``settings``.

    ``level`` applies to the mailrender loggers; records from other
    libraries only pass at ``library_level`` or above. Documents and the CLI
    summary use stdout, so logs never mix into them.
    """
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": _formatter_config(settings.structured)},
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": {PACKAGE_LOGGER: {"level": settings.level}},
            "root": {"handlers": ["stderr"], "level": settings.library_level},
        }
    )


__all__ = ["PACKAGE_LOGGER", "StructuredFormatter", "configure_logging"]
