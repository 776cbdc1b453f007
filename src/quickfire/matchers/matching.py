"""Polymorphic value matching and named-attribute lookup used by matchers."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Matcher(Protocol):
    """A value that decides for itself whether it matches an actual value."""

    def matches(self, actual: Any) -> bool: ...


@dataclass(frozen=True, slots=True)
class AttributeLookup:
    """Explicit found/missing result of reading a named attribute."""

    found: bool
    value: Any = None

    @classmethod
    def present(cls, value: Any) -> AttributeLookup:
        return cls(found=True, value=value)

    @classmethod
    def missing(cls) -> AttributeLookup:
        return cls(found=False)


@runtime_checkable
class AttributeSource(Protocol):
    """Subjects that expose named attributes through an explicit lookup."""

    def lookup_attribute(self, name: str) -> AttributeLookup: ...


def lookup_attribute(subject: object, name: str) -> AttributeLookup:
    """Read ``name`` off ``subject`` without raising when it is absent.

    ``AttributeSource`` subjects answer for themselves, mappings answer by key,
    and every other object answers through attribute access.
    """

    if isinstance(subject, AttributeSource) and not isinstance(subject, type):
        return subject.lookup_attribute(name)
    if isinstance(subject, Mapping):
        if name in subject:
            return AttributeLookup.present(subject[name])
        return AttributeLookup.missing()
    try:
        value = getattr(subject, name)
    except AttributeError:
        return AttributeLookup.missing()
    return AttributeLookup.present(value)


def matches(expected: object, actual: object) -> bool:
    """Return whether ``actual`` satisfies ``expected``.

    Classes match their instances, ``Matcher`` objects are asked directly,
    compiled patterns search strings, and everything else compares with ``==``.
    """

    if isinstance(expected, type):
        return isinstance(actual, expected)
    if isinstance(expected, Matcher):
        return bool(expected.matches(actual))
    if isinstance(expected, re.Pattern):
        return isinstance(actual, str) and expected.search(actual) is not None
    return bool(expected == actual)


class Satisfies:
    """Matcher wrapping a plain predicate."""

    __slots__ = ("_description", "_predicate")

    def __init__(self, predicate: Callable[[Any], object], description: str | None = None) -> None:
        if not callable(predicate):
            raise TypeError("predicate must be callable")
        self._predicate = predicate
        self._description = description or getattr(predicate, "__name__", "predicate")

    def matches(self, actual: Any) -> bool:
        return bool(self._predicate(actual))

    def __repr__(self) -> str:
        return f"Satisfies({self._description})"


class Anything:
    """Matcher accepting every value, including ``None``."""

    __slots__ = ()

    def matches(self, actual: Any) -> bool:
        return True

    def __repr__(self) -> str:
        return "Anything()"


__all__ = [
    "Anything",
    "AttributeLookup",
    "AttributeSource",
    "Matcher",
    "Satisfies",
    "lookup_attribute",
    "matches",
]
