"""Shared fixtures for quickfire tests."""

from __future__ import annotations

from typing import Any

import pytest
import structlog
import structlog.contextvars

from quickfire.config.runtime import Configuration
from quickfire.matchers.builtin import register_builtin_matchers
from quickfire.matchers.registry import MatcherRegistry
from quickfire.utils.host import HostCapabilities, supports_forking


class RecordingLogger:
    """Stand-in for a structlog bound logger that keeps every call."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def _log(self, level: str, event: str, **fields: Any) -> None:
        self.records.append((level, event, fields))

    def debug(self, event: str, **fields: Any) -> None:
        self._log("debug", event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self._log("info", event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._log("warning", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self._log("error", event, **fields)

    def events(self, level: str | None = None) -> list[str]:
        return [event for lvl, event, _ in self.records if level is None or lvl == level]


@pytest.fixture(autouse=True)
def _reset_structlog() -> Any:
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def registry() -> MatcherRegistry:
    return register_builtin_matchers(MatcherRegistry())


@pytest.fixture
def inline_host() -> HostCapabilities:
    return HostCapabilities(supports_forking=False, usable_cores=4)


@pytest.fixture
def forking_host() -> HostCapabilities:
    if not supports_forking():
        pytest.skip("host cannot fork worker processes")
    return HostCapabilities(supports_forking=True, usable_cores=4)


@pytest.fixture
def inline_configuration(inline_host: HostCapabilities) -> Configuration:
    return Configuration(host=inline_host)


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()
