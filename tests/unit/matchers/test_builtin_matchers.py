"""Unit tests for the builtin matcher catalog."""

from __future__ import annotations

import re
from dataclasses import dataclass

import pytest

from quickfire.matchers.builtin import (
    register_builtin_matchers,
    to_be,
    to_be_a,
    to_be_falsy,
    to_be_truthy,
    to_equal,
    to_have_attributes,
    to_include,
    to_match,
    to_raise,
)
from quickfire.matchers.context import invoke_matcher
from quickfire.matchers.matching import Satisfies
from quickfire.matchers.registry import MatcherRegistry, TypeMismatch


@dataclass
class Person:
    name: str
    age: int


def test_to_have_attributes_passes_when_all_attributes_match() -> None:
    person = Person(name="Joel", age=30)

    outcome = invoke_matcher(
        "to_have_attributes", to_have_attributes, person, kwargs={"name": "Joel", "age": 30}
    )

    assert outcome.passed


def test_to_have_attributes_mismatch_names_attribute_expected_and_actual() -> None:
    person = Person(name="Joel", age=30)

    outcome = invoke_matcher("to_have_attributes", to_have_attributes, person, kwargs={"age": 31})

    assert outcome.failed
    message = outcome.message or ""
    assert "`age`" in message
    assert "`31`" in message
    assert "(was `30`)" in message


def test_to_have_attributes_missing_attribute_is_failure_not_error() -> None:
    person = Person(name="Joel", age=30)

    outcome = invoke_matcher(
        "to_have_attributes", to_have_attributes, person, kwargs={"missing_attr": 1}
    )

    assert outcome.failed
    assert "to respond to `missing_attr`" in (outcome.message or "")


def test_to_have_attributes_accepts_positional_mapping_and_matchers() -> None:
    person = Person(name="Joel", age=30)

    outcome = invoke_matcher(
        "to_have_attributes",
        to_have_attributes,
        person,
        ({"name": re.compile(r"^J")},),
        {"age": Satisfies(lambda value: value >= 18, "adult")},
    )

    assert outcome.passed


def test_to_have_attributes_reads_mapping_keys() -> None:
    outcome = invoke_matcher(
        "to_have_attributes", to_have_attributes, {"count": 2}, kwargs={"count": int}
    )

    assert outcome.passed


def test_to_have_attributes_with_nothing_to_check_passes() -> None:
    assert invoke_matcher("to_have_attributes", to_have_attributes, object()).passed


@pytest.mark.parametrize(
    ("implementation", "subject", "args", "passes"),
    [
        (to_equal, 3, (3,), True),
        (to_equal, 3, (4,), False),
        (to_be, None, (None,), True),
        (to_be, [], ([],), False),
        (to_be_a, True, (int,), True),
        (to_be_a, "x", (int,), False),
        (to_be_truthy, [1], (), True),
        (to_be_truthy, 0, (), False),
        (to_be_falsy, "", (), True),
        (to_be_falsy, "x", (), False),
        (to_match, "hello world", (re.compile("wor"),), True),
        (to_match, "hello", (re.compile("^x"),), False),
        (to_include, [1, 2, 3], (1, 3), True),
        (to_include, "abc", ("d",), False),
    ],
)
def test_builtin_matcher_outcomes(
    implementation: object, subject: object, args: tuple[object, ...], passes: bool
) -> None:
    outcome = invoke_matcher("builtin", implementation, subject, args)  # type: ignore[arg-type]

    assert outcome.passed is passes
    assert outcome.failed is (not passes)


def test_to_raise_passes_for_expected_exception_and_message() -> None:
    def explode() -> None:
        raise KeyError("missing")

    assert invoke_matcher("to_raise", to_raise, explode, (KeyError,)).passed
    assert invoke_matcher(
        "to_raise", to_raise, explode, (LookupError,), {"message": re.compile("missing")}
    ).passed


def test_to_raise_fails_for_wrong_exception_or_no_exception() -> None:
    def explode() -> None:
        raise ValueError("nope")

    wrong = invoke_matcher("to_raise", to_raise, explode, (KeyError,))
    silent = invoke_matcher("to_raise", to_raise, lambda: None, (KeyError,))

    assert wrong.failed
    assert "got `ValueError: nope`" in (wrong.message or "")
    assert silent.failed
    assert "to raise `KeyError`" in (silent.message or "")


def test_registered_catalog_restricts_subject_types(registry: MatcherRegistry) -> None:
    assert "to_have_attributes" in registry
    assert registry.resolve("to_include", [1]) is to_include
    with pytest.raises(TypeMismatch):
        registry.resolve("to_include", 5)
    with pytest.raises(TypeMismatch):
        registry.resolve("to_raise", "not callable")


def test_builtin_install_can_leave_existing_names_alone() -> None:
    def custom_equal(context: object) -> None:
        return None

    registry = MatcherRegistry()
    registry.register("to_equal", custom_equal)

    register_builtin_matchers(registry, replace=False)
    assert registry.resolve("to_equal", 1) is custom_equal
    assert registry.resolve("to_be", 1) is to_be

    register_builtin_matchers(registry)
    assert registry.resolve("to_equal", 1) is to_equal
