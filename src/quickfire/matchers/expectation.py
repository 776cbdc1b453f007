"""``expect(value).<matcher>(...)`` dispatch through the registry."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from quickfire.matchers.context import MatcherCrashed, invoke_matcher

if TYPE_CHECKING:
    from quickfire.matchers.context import Outcome
    from quickfire.matchers.registry import MatcherRegistry

OutcomeRecorder = Callable[["Outcome"], None]


class Expectation:
    """Subject bound to a registry; attribute access resolves a matcher by name.

    Resolution failures (``MatcherNotFound``, ``TypeMismatch``) raise at lookup
    time. A matcher that crashes records an errored outcome and then raises
    ``MatcherCrashed``.
    """

    __slots__ = ("_record", "_registry", "_subject")

    def __init__(
        self,
        subject: object,
        registry: MatcherRegistry,
        record: OutcomeRecorder | None = None,
    ) -> None:
        self._subject = subject
        self._registry = registry
        self._record = record

    @property
    def subject(self) -> Any:
        return self._subject

    def __getattr__(self, name: str) -> Callable[..., Outcome]:
        if name.startswith("_"):
            raise AttributeError(name)
        implementation = self._registry.resolve(name, self._subject)

        def invoke(*args: object, **kwargs: object) -> Outcome:
            outcome = invoke_matcher(name, implementation, self._subject, args, kwargs)
            if self._record is not None:
                self._record(outcome)
            if outcome.errored:
                raise MatcherCrashed(name, outcome) from outcome.cause
            return outcome

        invoke.__name__ = name
        return invoke

    def __repr__(self) -> str:
        return f"Expectation({self._subject!r})"


__all__ = ["Expectation", "OutcomeRecorder"]
