"""Stable constants shared across the registry, configuration and scheduler."""

from __future__ import annotations

from typing import Final

# Schema versions for configuration files.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Default run knobs.
DEFAULT_THREADS: Final[int] = 8
DEFAULT_CONFIG_FILE: Final[str] = "quickfire.toml"
ENV_PREFIX: Final[str] = "QUICKFIRE_"

# Presentation glyphs.
DEFAULT_SUCCESS_SYMBOL: Final[str] = "🟢"
DEFAULT_FAILURE_SYMBOL: Final[str] = "🔴"
DEFAULT_SUCCESS_GLYPHS: Final[tuple[str, ...]] = (
    "💃",
    "🕺",
    "🎉",
    "🎊",
    "💪",
    "👏",
    "🙌",
    "✨",
    "🥳",
    "🎈",
    "🌈",
    "🎯",
    "🏆",
)

# Logging.
DEFAULT_LOG_LEVEL: Final[str] = "INFO"
LOG_FORMATS: Final[tuple[str, ...]] = ("console", "json")

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_FAILURE_SYMBOL",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_SUCCESS_GLYPHS",
    "DEFAULT_SUCCESS_SYMBOL",
    "DEFAULT_THREADS",
    "ENV_PREFIX",
    "LOG_FORMATS",
]
