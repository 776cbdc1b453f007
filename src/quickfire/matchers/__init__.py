"""Matcher registry, assertion context, matching semantics and builtin catalog."""

from quickfire.matchers.builtin import register_builtin_matchers
from quickfire.matchers.context import (
    AssertionContext,
    AssertionFailed,
    MatcherCrashed,
    MatcherError,
    MatcherImplementation,
    MessageProducer,
    Outcome,
    OutcomeAlreadyRecorded,
    OutcomeStatus,
    invoke_matcher,
)
from quickfire.matchers.expectation import Expectation
from quickfire.matchers.matching import (
    Anything,
    AttributeLookup,
    AttributeSource,
    Matcher,
    Satisfies,
    lookup_attribute,
    matches,
)
from quickfire.matchers.registry import (
    MatcherEntry,
    MatcherNotFound,
    MatcherRegistry,
    RegistryFrozenError,
    TypeMismatch,
)

__all__ = [
    "Anything",
    "AssertionContext",
    "AssertionFailed",
    "AttributeLookup",
    "AttributeSource",
    "Expectation",
    "Matcher",
    "MatcherCrashed",
    "MatcherEntry",
    "MatcherError",
    "MatcherImplementation",
    "MatcherNotFound",
    "MatcherRegistry",
    "MessageProducer",
    "Outcome",
    "OutcomeAlreadyRecorded",
    "OutcomeStatus",
    "RegistryFrozenError",
    "Satisfies",
    "TypeMismatch",
    "invoke_matcher",
    "lookup_attribute",
    "matches",
    "register_builtin_matchers",
]
