"""Assertion context and the invocation boundary every matcher runs inside.

A matcher is any callable ``implementation(context, *args, **kwargs)``. It reads
``context.value`` and records exactly one outcome per invocation through
``assert_that``/``refute_that``/``failure``/``success``. Failure messages are
produced lazily: a message callable is only invoked on the failure path.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

MessageProducer = Callable[[], object] | str
MatcherImplementation = Callable[..., object]


class OutcomeStatus(StrEnum):
    """Lifecycle of one matcher invocation."""

    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"
    ERRORED = "errored"


@dataclass(frozen=True, slots=True)
class Outcome:
    """Terminal (or pending) state of one assertion invocation."""

    status: OutcomeStatus
    message: str | None = None
    cause: BaseException | None = None

    @property
    def pending(self) -> bool:
        return self.status is OutcomeStatus.PENDING

    @property
    def passed(self) -> bool:
        return self.status is OutcomeStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status is OutcomeStatus.FAILED

    @property
    def errored(self) -> bool:
        return self.status is OutcomeStatus.ERRORED


PENDING = Outcome(OutcomeStatus.PENDING)


class AssertionFailed(BaseException):  # noqa: N818
    """Unwinds a matcher after its failure has been recorded.

    Derives from ``BaseException`` so a matcher's own ``except Exception``
    cannot discard a failure that is already on the context.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OutcomeAlreadyRecorded(RuntimeError):
    """Raised when a settled context is asked to transition again."""


class MatcherError(Exception):
    """Base class for matcher resolution and dispatch errors."""


class MatcherCrashed(MatcherError):  # noqa: N818
    """An unexpected error raised by a matcher's own logic."""

    def __init__(self, name: str, outcome: Outcome) -> None:
        super().__init__(f"matcher `{name}` crashed: {outcome.message}")
        self.name = name
        self.outcome = outcome
        self.cause = outcome.cause


class AssertionContext:
    """Per-invocation view of the subject plus its single outcome."""

    __slots__ = ("_checks", "_matcher_name", "_outcome", "_subject")

    def __init__(self, subject: object, *, matcher_name: str | None = None) -> None:
        self._subject = subject
        self._matcher_name = matcher_name
        self._outcome = PENDING
        self._checks = 0

    @property
    def value(self) -> Any:
        return self._subject

    @property
    def subject(self) -> Any:
        return self._subject

    @property
    def matcher_name(self) -> str | None:
        return self._matcher_name

    @property
    def outcome(self) -> Outcome:
        return self._outcome

    @property
    def checks(self) -> int:
        return self._checks

    def assert_that(
        self, predicate: object, message: MessageProducer = "assertion failed"
    ) -> None:
        """Count a passing check, or fail with the lazily produced message."""

        self._ensure_pending()
        if predicate:
            self._checks += 1
            return
        self._fail(message)

    def refute_that(
        self, predicate: object, message: MessageProducer = "refutation failed"
    ) -> None:
        """Inverse of ``assert_that``."""

        self.assert_that(not predicate, message)

    def failure(self, message: MessageProducer = "failed") -> None:
        """Unconditionally fail this invocation."""

        self._ensure_pending()
        self._fail(message)

    def success(self) -> None:
        """Unconditionally pass this invocation."""

        self._ensure_pending()
        self._checks += 1
        self._outcome = Outcome(OutcomeStatus.PASSED)

    def error(self, cause: BaseException) -> Outcome:
        """Record that the matcher itself crashed."""

        self._ensure_pending()
        self._outcome = Outcome(
            OutcomeStatus.ERRORED,
            message=f"{type(cause).__name__}: {cause}",
            cause=cause,
        )
        return self._outcome

    def settle(self) -> Outcome:
        """Close a pending invocation after the matcher returned normally."""

        if not self._outcome.pending:
            return self._outcome
        if self._checks:
            self._outcome = Outcome(OutcomeStatus.PASSED)
            return self._outcome
        name = self._matcher_name or "matcher"
        return self.error(RuntimeError(f"`{name}` returned without recording an outcome"))

    def _fail(self, message: MessageProducer) -> None:
        rendered = _render_message(message)
        self._outcome = Outcome(OutcomeStatus.FAILED, message=rendered)
        raise AssertionFailed(rendered)

    def _ensure_pending(self) -> None:
        if not self._outcome.pending:
            raise OutcomeAlreadyRecorded(
                f"outcome already recorded as {self._outcome.status.value}"
            )


def invoke_matcher(
    name: str,
    implementation: MatcherImplementation,
    subject: object,
    args: Sequence[object] = (),
    kwargs: Mapping[str, object] | None = None,
) -> Outcome:
    """Run one matcher invocation against a fresh context and return its outcome.

    An exception raised by the matcher while its outcome is still pending becomes
    an errored outcome carrying the cause; callers decide whether to escalate it.
    """

    context = AssertionContext(subject, matcher_name=name)
    try:
        implementation(context, *args, **dict(kwargs or {}))
    except AssertionFailed:
        return context.outcome
    except Exception as exc:
        if not context.outcome.pending:
            raise
        return context.error(exc)
    return context.settle()


def _render_message(message: MessageProducer) -> str:
    if callable(message):
        return str(message())
    return str(message)


__all__ = [
    "PENDING",
    "AssertionContext",
    "AssertionFailed",
    "MatcherCrashed",
    "MatcherError",
    "MatcherImplementation",
    "MessageProducer",
    "Outcome",
    "OutcomeAlreadyRecorded",
    "OutcomeStatus",
    "invoke_matcher",
]
