"""Core utilities shared across :mod:`componentize`.

Configuration loading and logging setup live here so the extraction package
only depends on explicit settings and a bound logger.
"""

from __future__ import annotations

from .config import AppConfig, ExtractSettings, load_config
from .logging import configure_logging, get_logger

__all__ = [
    "AppConfig",
    "ExtractSettings",
    "configure_logging",
    "get_logger",
    "load_config",
]
