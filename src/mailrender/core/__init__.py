"""Core utilities for configuration, logging, and the shared domain model."""

from .config import AppSettings, LoggingSettings, OutputSettings, load_app_settings
from .logging import configure_logging
from .stream import DocumentWriter

__all__ = [
    "AppSettings",
    "DocumentWriter",
    "LoggingSettings",
    "OutputSettings",
    "configure_logging",
    "load_app_settings",
]
