"""Observability exports."""

from quickfire.observability.logging import (
    CORRELATION_KEYS,
    configure_from_config,
    configure_logging,
    correlation_scope,
)

__all__ = [
    "CORRELATION_KEYS",
    "configure_from_config",
    "configure_logging",
    "correlation_scope",
]
