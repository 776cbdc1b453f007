"""Structured logging setup for quickfire runs.

File: src/quickfire/observability/logging.py

Purpose
- Configure ``structlog`` for console or JSON-lines output.
- Bind correlation fields (``run_id``, ``shard_index``, ``unit_id``) for records in scope.

Functional requirements
- Level filtering honours the ``[observability].log_level`` setting.
- Correlation fields are carried through ``structlog.contextvars`` so forked
  workers inherit the coordinator's bindings.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Final, TextIO

import structlog
from structlog.contextvars import bind_contextvars, merge_contextvars, unbind_contextvars

from quickfire.constants import DEFAULT_LOG_LEVEL, LOG_FORMATS

CORRELATION_KEYS: Final[tuple[str, ...]] = ("run_id", "shard_index", "unit_id")


def configure_logging(
    level: int | str = DEFAULT_LOG_LEVEL,
    fmt: str = "console",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog globally.

    Parameters
    ----------
    level:
        Minimum level, as a ``logging`` constant or a level name.
    fmt:
        ``"console"`` for human-readable lines, ``"json"`` for JSON lines.
    stream:
        Output stream; defaults to ``sys.stderr``.
    """

    if fmt not in LOG_FORMATS:
        raise ValueError(f"log format must be one of {', '.join(LOG_FORMATS)}, got {fmt!r}")

    renderer: structlog.types.Processor
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_parse_log_level(level)),
        logger_factory=structlog.PrintLoggerFactory(stream if stream is not None else sys.stderr),
        cache_logger_on_first_use=False,
    )


def configure_from_config(
    config: Mapping[str, object], *, stream: TextIO | None = None
) -> None:
    """Configure logging from a validated config mapping's ``observability`` section."""

    section = config.get("observability")
    observability = section if isinstance(section, Mapping) else {}
    level = observability.get("log_level", DEFAULT_LOG_LEVEL)
    fmt = observability.get("log_format", "console")
    configure_logging(
        level if isinstance(level, (int, str)) else DEFAULT_LOG_LEVEL,
        str(fmt),
        stream,
    )


@contextmanager
def correlation_scope(**fields: object) -> Iterator[None]:
    """Temporarily bind correlation fields for log records in scope."""

    for key in fields:
        if key not in CORRELATION_KEYS:
            raise ValueError(
                f"unknown correlation key {key!r}; expected one of {', '.join(CORRELATION_KEYS)}"
            )
    bound = {key: value for key, value in fields.items() if value is not None}
    bind_contextvars(**bound)
    try:
        yield
    finally:
        unbind_contextvars(*bound)


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, bool):
        raise ValueError("log level must be an int or level name")
    if isinstance(value, int):
        return value
    parsed = logging.getLevelName(value.strip().upper())
    if not isinstance(parsed, int):
        raise ValueError(f"unknown log level {value!r}")
    return parsed


__all__ = [
    "CORRELATION_KEYS",
    "configure_from_config",
    "configure_logging",
    "correlation_scope",
]
