"""Unit tests for value matching and attribute lookup."""

from __future__ import annotations

import re
from types import SimpleNamespace

from quickfire.matchers.matching import (
    Anything,
    AttributeLookup,
    Satisfies,
    lookup_attribute,
    matches,
)


class _Explicit:
    def lookup_attribute(self, name: str) -> AttributeLookup:
        if name == "size":
            return AttributeLookup.present(3)
        return AttributeLookup.missing()


class _Exploding:
    @property
    def broken(self) -> int:
        raise AttributeError("nope")


def test_class_matches_instances_including_subclasses() -> None:
    assert matches(int, 3)
    assert matches(int, True)
    assert not matches(int, "3")


def test_matcher_objects_and_patterns() -> None:
    assert matches(Anything(), None)
    assert matches(Satisfies(lambda value: value > 2), 3)
    assert not matches(Satisfies(lambda value: value > 2), 1)
    assert matches(re.compile(r"\d+"), "abc123")
    assert not matches(re.compile(r"\d+"), 123)


def test_plain_values_compare_with_equality() -> None:
    assert matches([1, 2], [1, 2])
    assert not matches("a", "b")


def test_lookup_attribute_on_plain_objects() -> None:
    subject = SimpleNamespace(name="Joel")

    assert lookup_attribute(subject, "name") == AttributeLookup.present("Joel")
    assert lookup_attribute(subject, "age") == AttributeLookup.missing()
    assert not lookup_attribute(_Exploding(), "broken").found


def test_lookup_attribute_on_mappings_and_sources() -> None:
    assert lookup_attribute({"a": None}, "a") == AttributeLookup.present(None)
    assert not lookup_attribute({"a": 1}, "b").found
    assert lookup_attribute(_Explicit(), "size").value == 3
    assert not lookup_attribute(_Explicit(), "name").found
