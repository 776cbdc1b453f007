"""
quickfire — execution configuration.

File: src/quickfire/config/runtime.py

Purpose
- Hold the knobs a run reads: worker processes, threads per process, outcome
  symbols, celebration glyphs, run policy, and the owned matcher registry.

What is included in this file
- ``Configuration`` with validated setters and a freeze step taken by the scheduler.
- ``Configuration.from_mapping`` for building one from a validated config mapping.

Functional requirements
- ``processes`` defaults to the host's usable-core hint when the host can fork,
  otherwise 1.
- After ``freeze()`` every write raises ``ConfigurationFrozenError`` and the
  registry rejects new matchers.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from quickfire.config.schema import assert_valid_config, default_config, merge_config
from quickfire.constants import (
    DEFAULT_FAILURE_SYMBOL,
    DEFAULT_SUCCESS_GLYPHS,
    DEFAULT_SUCCESS_SYMBOL,
    DEFAULT_THREADS,
)
from quickfire.matchers.builtin import register_builtin_matchers
from quickfire.matchers.registry import MatcherRegistry
from quickfire.utils.host import HostCapabilities, detect_host

if TYPE_CHECKING:
    from quickfire.matchers.context import MatcherImplementation


class ConfigurationFrozenError(RuntimeError):
    """Raised when a frozen configuration is modified."""


class Configuration:
    """Settings for one run plus the matcher registry it resolves against."""

    def __init__(
        self,
        *,
        host: HostCapabilities | None = None,
        registry: MatcherRegistry | None = None,
        builtin_matchers: bool = True,
    ) -> None:
        self._frozen = False
        self._host = host if host is not None else detect_host()
        if registry is None:
            self._registry = MatcherRegistry()
            if builtin_matchers:
                register_builtin_matchers(self._registry)
        else:
            # A supplied registry keeps its own entries; a frozen one is used as-is.
            self._registry = registry
            if builtin_matchers and not registry.frozen:
                register_builtin_matchers(registry, replace=False)

        self._processes = self._host.default_processes
        self._threads = DEFAULT_THREADS
        self._success_symbol = DEFAULT_SUCCESS_SYMBOL
        self._failure_symbol = DEFAULT_FAILURE_SYMBOL
        self._success_glyphs: tuple[str, ...] = DEFAULT_SUCCESS_GLYPHS
        self._fail_fast = False
        self._abort_on_worker_lost = False
        self._require_assertions = False

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, object],
        *,
        host: HostCapabilities | None = None,
        registry: MatcherRegistry | None = None,
        builtin_matchers: bool = True,
    ) -> Configuration:
        """Build a configuration from a (partial) config mapping.

        The mapping is merged over the defaults and validated first, so the
        output of ``load_config`` and hand-written fragments both work.
        """

        config = assert_valid_config(merge_config(default_config(), mapping))
        run: dict[str, Any] = config["run"]
        presentation: dict[str, Any] = config["presentation"]

        configuration = cls(host=host, registry=registry, builtin_matchers=builtin_matchers)
        if "processes" in run:
            configuration.processes = run["processes"]
        configuration.threads = run["threads"]
        configuration.fail_fast = run["fail_fast"]
        configuration.abort_on_worker_lost = run["abort_on_worker_lost"]
        configuration.require_assertions = run["require_assertions"]
        configuration.success_symbol = presentation["success_symbol"]
        configuration.failure_symbol = presentation["failure_symbol"]
        configuration.success_glyphs = presentation["success_glyphs"]
        return configuration

    @property
    def host(self) -> HostCapabilities:
        return self._host

    @property
    def registry(self) -> MatcherRegistry:
        return self._registry

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def processes(self) -> int:
        return self._processes

    @processes.setter
    def processes(self, value: int) -> None:
        self._ensure_mutable("processes")
        self._processes = _positive_int("processes", value)

    @property
    def threads(self) -> int:
        return self._threads

    @threads.setter
    def threads(self, value: int) -> None:
        self._ensure_mutable("threads")
        self._threads = _positive_int("threads", value)

    @property
    def success_symbol(self) -> str:
        return self._success_symbol

    @success_symbol.setter
    def success_symbol(self, value: str) -> None:
        self._ensure_mutable("success_symbol")
        self._success_symbol = _symbol("success_symbol", value)

    @property
    def failure_symbol(self) -> str:
        return self._failure_symbol

    @failure_symbol.setter
    def failure_symbol(self, value: str) -> None:
        self._ensure_mutable("failure_symbol")
        self._failure_symbol = _symbol("failure_symbol", value)

    @property
    def success_glyphs(self) -> tuple[str, ...]:
        return self._success_glyphs

    @success_glyphs.setter
    def success_glyphs(self, value: Sequence[str]) -> None:
        self._ensure_mutable("success_glyphs")
        if isinstance(value, str) or not isinstance(value, Sequence):
            raise ValueError("success_glyphs must be a sequence of strings")
        glyphs = tuple(value)
        if not glyphs:
            raise ValueError("success_glyphs must not be empty")
        for glyph in glyphs:
            _symbol("success_glyphs", glyph)
        self._success_glyphs = glyphs

    # Alias kept for callers that know the setting by its older name.
    success_emoji = success_glyphs

    @property
    def fail_fast(self) -> bool:
        return self._fail_fast

    @fail_fast.setter
    def fail_fast(self, value: bool) -> None:
        self._ensure_mutable("fail_fast")
        self._fail_fast = _flag("fail_fast", value)

    @property
    def abort_on_worker_lost(self) -> bool:
        return self._abort_on_worker_lost

    @abort_on_worker_lost.setter
    def abort_on_worker_lost(self, value: bool) -> None:
        self._ensure_mutable("abort_on_worker_lost")
        self._abort_on_worker_lost = _flag("abort_on_worker_lost", value)

    @property
    def require_assertions(self) -> bool:
        return self._require_assertions

    @require_assertions.setter
    def require_assertions(self, value: bool) -> None:
        self._ensure_mutable("require_assertions")
        self._require_assertions = _flag("require_assertions", value)

    def matcher(
        self, name: str, implementation: MatcherImplementation, *accepted_types: type
    ) -> MatcherImplementation:
        """Register a matcher on the owned registry."""

        self._ensure_mutable("matchers")
        return self._registry.register(name, implementation, *accepted_types)

    def freeze(self) -> None:
        """Make this configuration and its registry read-only."""

        self._frozen = True
        self._registry.freeze()

    def as_dict(self) -> dict[str, Any]:
        return {
            "run": {
                "processes": self._processes,
                "threads": self._threads,
                "fail_fast": self._fail_fast,
                "abort_on_worker_lost": self._abort_on_worker_lost,
                "require_assertions": self._require_assertions,
            },
            "presentation": {
                "success_symbol": self._success_symbol,
                "failure_symbol": self._failure_symbol,
                "success_glyphs": list(self._success_glyphs),
            },
        }

    def _ensure_mutable(self, field_name: str) -> None:
        if self._frozen:
            raise ConfigurationFrozenError(
                f"cannot change {field_name}: configuration is frozen for the active run"
            )

    def __repr__(self) -> str:
        return (
            f"Configuration(processes={self._processes}, threads={self._threads}, "
            f"frozen={self._frozen})"
        )


def _positive_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 1:
        raise ValueError(f"{name} must be >= 1")
    return value


def _symbol(name: str, value: object) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty string")
    return value


def _flag(name: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be a boolean, got {type(value).__name__}")
    return value


__all__ = ["Configuration", "ConfigurationFrozenError"]
