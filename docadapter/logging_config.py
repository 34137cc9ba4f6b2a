"""
Logging setup for applications embedding docadapter.

The library itself only creates module loggers; call setup_logging() once
from the application entry point to install a handler.
"""

from __future__ import annotations

import logging

import json_log_formatter

from .config import LoggingSettings


def setup_logging(settings: LoggingSettings | None = None) -> None:
    """Configure root logging.

    Args:
        settings: Logging settings (loaded from env if not provided)
    """
    settings = settings or LoggingSettings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]
