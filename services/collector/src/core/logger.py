"""Collector logger shim.

Delegates to the shared logger; the JSON formatter is installed by the entry
point through ``configure_logging``.
"""

from __future__ import annotations

import logging

from shared.constants import Environment
from shared.logging.json import configure_logging as _shared_configure_logging
from shared.logging.logger import get_logger as _shared_get_logger

from src.core.config import settings


def log_format(environment: str, configured: str) -> str:
    # Development runs read logs in a terminal
    if Environment.is_development(environment):
        return "text"
    return configured


def configure_logging() -> logging.Logger:
    return _shared_configure_logging(
        service=settings.otel_service_name,
        level=settings.app_log_level,
        environment=settings.app_environment,
        redaction_patterns=settings.app_log_redaction_patterns,
        fmt=log_format(settings.app_environment, settings.app_log_format),
    )


def get_logger(name: str) -> logging.Logger:
    return _shared_get_logger(name)
