"""Shared utilities and components for the collector."""

from .config import BaseLoggingConfig, BaseServiceConfig
from .constants import Environment, Streams, Windows

__all__ = [
    "Environment",
    "Streams",
    "Windows",
    "BaseLoggingConfig",
    "BaseServiceConfig",
]
