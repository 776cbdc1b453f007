"""Builtin matcher catalog."""

from __future__ import annotations

from collections.abc import Callable, Container, Mapping
from typing import TYPE_CHECKING

from quickfire.matchers.matching import lookup_attribute, matches

if TYPE_CHECKING:
    from quickfire.matchers.context import AssertionContext
    from quickfire.matchers.registry import MatcherRegistry


def to_have_attributes(
    context: AssertionContext,
    expected: Mapping[str, object] | None = None,
    /,
    **attributes: object,
) -> None:
    value = context.value
    pairs = {**dict(expected or {}), **attributes}
    for name, wanted in pairs.items():
        lookup = lookup_attribute(value, name)
        if not lookup.found:
            context.failure(lambda name=name: f"expected `{value!r}` to respond to `{name}`")
        actual = lookup.value
        context.assert_that(
            matches(wanted, actual),
            lambda name=name, wanted=wanted, actual=actual: (
                f"expected `{value!r}` to have the attribute `{name}` equal to "
                f"`{wanted!r}` (was `{actual!r}`)"
            ),
        )
    if not pairs:
        context.success()


def to_equal(context: AssertionContext, expected: object) -> None:
    context.assert_that(
        context.value == expected,
        lambda: f"expected `{context.value!r}` to equal `{expected!r}`",
    )


def to_be(context: AssertionContext, expected: object) -> None:
    context.assert_that(
        context.value is expected,
        lambda: f"expected `{context.value!r}` to be the same object as `{expected!r}`",
    )


def to_be_a(context: AssertionContext, expected_type: type | tuple[type, ...]) -> None:
    context.assert_that(
        isinstance(context.value, expected_type),
        lambda: (
            f"expected `{context.value!r}` to be a `{expected_type!r}`, "
            f"got `{type(context.value).__name__}`"
        ),
    )


def to_be_truthy(context: AssertionContext) -> None:
    context.assert_that(context.value, lambda: f"expected `{context.value!r}` to be truthy")


def to_be_falsy(context: AssertionContext) -> None:
    context.refute_that(context.value, lambda: f"expected `{context.value!r}` to be falsy")


def to_match(context: AssertionContext, expected: object) -> None:
    context.assert_that(
        matches(expected, context.value),
        lambda: f"expected `{context.value!r}` to match `{expected!r}`",
    )


def to_include(context: AssertionContext, *members: object) -> None:
    for member in members:
        context.assert_that(
            member in context.value,
            lambda member=member: f"expected `{context.value!r}` to include `{member!r}`",
        )
    if not members:
        context.success()


def to_raise(
    context: AssertionContext,
    expected: type[BaseException] = Exception,
    *,
    message: object = None,
) -> None:
    try:
        context.value()
    except expected as exc:
        if message is not None:
            context.assert_that(
                matches(message, str(exc)),
                lambda: f"expected `{expected.__name__}` with message `{message!r}`, got `{exc}`",
            )
        else:
            context.success()
        return
    except Exception as exc:
        context.failure(
            lambda: f"expected `{expected.__name__}` to be raised, got `{type(exc).__name__}: {exc}`"
        )
    context.failure(lambda: f"expected `{context.value!r}` to raise `{expected.__name__}`")


_BUILTINS: tuple[tuple[str, Callable[..., None], tuple[type, ...]], ...] = (
    ("to_have_attributes", to_have_attributes, ()),
    ("to_equal", to_equal, ()),
    ("to_be", to_be, ()),
    ("to_be_a", to_be_a, ()),
    ("to_be_truthy", to_be_truthy, ()),
    ("to_be_falsy", to_be_falsy, ()),
    ("to_match", to_match, ()),
    ("to_include", to_include, (Container,)),
    ("to_raise", to_raise, (Callable,)),
)


def register_builtin_matchers(
    registry: MatcherRegistry, *, replace: bool = True
) -> MatcherRegistry:
    """Install the builtin catalog into ``registry``.

    With ``replace=False`` names the registry already holds keep their entries.
    """

    for name, implementation, accepted_types in _BUILTINS:
        if replace or name not in registry:
            registry.register(name, implementation, *accepted_types)
    return registry


__all__ = [
    "register_builtin_matchers",
    "to_be",
    "to_be_a",
    "to_be_falsy",
    "to_be_truthy",
    "to_equal",
    "to_have_attributes",
    "to_include",
    "to_match",
    "to_raise",
]
