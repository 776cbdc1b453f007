"""Name-keyed matcher registry with type-aware resolution."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from quickfire.matchers.context import MatcherError, MatcherImplementation

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


class MatcherNotFound(MatcherError, AttributeError):  # noqa: N818
    """No matcher is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"no matcher registered as `{name}`")
        self.name = name


class TypeMismatch(MatcherError, TypeError):  # noqa: N818
    """The subject's type is not accepted by the resolved matcher."""

    def __init__(self, name: str, expected: tuple[type, ...], actual: type) -> None:
        expected_names = ", ".join(_type_name(item) for item in expected)
        super().__init__(
            f"matcher `{name}` expects a subject of type {expected_names}, "
            f"got {_type_name(actual)}"
        )
        self.name = name
        self.expected = expected
        self.actual = actual


class RegistryFrozenError(RuntimeError):
    """Raised when registering into a registry that a run has frozen."""


@dataclass(frozen=True, slots=True)
class MatcherEntry:
    """One registered matcher; an empty ``accepted_types`` accepts any subject."""

    name: str
    implementation: MatcherImplementation
    accepted_types: tuple[type, ...] = ()

    def accepts(self, subject: object) -> bool:
        if not self.accepted_types:
            return True
        return isinstance(subject, self.accepted_types)


class MatcherRegistry:
    """Mapping from matcher name to ``MatcherEntry``.

    Registration is last-write-wins and only allowed until ``freeze()``; after
    that the registry is read-only and safe to share across threads.
    """

    __slots__ = ("_entries", "_frozen", "_lock")

    def __init__(self) -> None:
        self._entries: dict[str, MatcherEntry] = {}
        self._frozen = False
        self._lock = threading.Lock()

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(
        self,
        name: str,
        implementation: MatcherImplementation,
        *accepted_types: type,
    ) -> MatcherImplementation:
        """Store ``implementation`` under ``name``, replacing any previous entry."""

        _validate_name(name)
        if not callable(implementation):
            raise TypeError(f"matcher `{name}` implementation must be callable")
        for item in accepted_types:
            if not isinstance(item, type):
                raise TypeError(
                    f"matcher `{name}` accepted types must be classes, "
                    f"got {type(item).__name__}"
                )

        entry = MatcherEntry(
            name=name,
            implementation=implementation,
            accepted_types=tuple(accepted_types),
        )
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(
                    f"cannot register `{name}`: registry is frozen for the active run"
                )
            self._entries[name] = entry
        return implementation

    def define(
        self, name: str, *accepted_types: type
    ) -> Callable[[MatcherImplementation], MatcherImplementation]:
        """Decorator form of ``register``."""

        def decorator(implementation: MatcherImplementation) -> MatcherImplementation:
            return self.register(name, implementation, *accepted_types)

        return decorator

    def resolve(self, name: str, subject: object) -> MatcherImplementation:
        """Return the implementation registered as ``name`` for ``subject``."""

        entry = self._entries.get(name)
        if entry is None:
            raise MatcherNotFound(name)
        if not entry.accepts(subject):
            raise TypeMismatch(name, entry.accepted_types, type(subject))
        return entry.implementation

    def entry(self, name: str) -> MatcherEntry:
        entry = self._entries.get(name)
        if entry is None:
            raise MatcherNotFound(name)
        return entry

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._entries))

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    def copy(self) -> MatcherRegistry:
        """Return an unfrozen registry holding the same entries."""

        clone = MatcherRegistry()
        with self._lock:
            clone._entries = dict(self._entries)
        return clone

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[MatcherEntry]:
        return iter(tuple(self._entries[name] for name in sorted(self._entries)))


def _validate_name(name: str) -> None:
    if not isinstance(name, str):
        raise TypeError(f"matcher name must be a string, got {type(name).__name__}")


def _type_name(value: type) -> str:
    return getattr(value, "__qualname__", None) or getattr(value, "__name__", repr(value))


__all__ = [
    "MatcherEntry",
    "MatcherNotFound",
    "MatcherRegistry",
    "RegistryFrozenError",
    "TypeMismatch",
]
