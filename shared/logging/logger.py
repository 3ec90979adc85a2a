"""Logger access for collector modules.

Falls back to a plain text configuration when a module logs before the entry
point has installed the JSON formatter (tests, ad-hoc scripts).
"""

from __future__ import annotations

import logging

from shared.logging.json import TEXT_FORMAT

_configured = False


def get_logger(name: str, auto_configure: bool = True) -> logging.Logger:
    """Get a logger, configuring a minimal handler on first use if needed."""
    global _configured

    if auto_configure and not _configured:
        _configure_minimal_logging()
        _configured = True

    logger = logging.getLogger(name)
    logger.propagate = True
    return logger


def _configure_minimal_logging():
    logging.basicConfig(level=logging.INFO, format=TEXT_FORMAT)


def is_configured() -> bool:
    return _configured


def mark_configured():
    """Called by shared.logging.json.configure_logging."""
    global _configured
    _configured = True
