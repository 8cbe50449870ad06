"""Core shared helpers for interview-prep subcommands."""

from __future__ import annotations

from .ai import load_client
from .config import (
    AIConfig,
    AppConfig,
    ConfigError,
    LoggingConfig,
    TrackingConfig,
    load_config,
    load_toml,
    merge_defaults,
    write_template,
)
from .logging import JsonLogFormatter, configure_logger

__all__ = [
    "load_client",
    "AIConfig",
    "AppConfig",
    "ConfigError",
    "LoggingConfig",
    "TrackingConfig",
    "load_config",
    "load_toml",
    "merge_defaults",
    "write_template",
    "configure_logger",
    "JsonLogFormatter",
]
