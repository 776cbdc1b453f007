"""Run a single test unit and turn whatever happens into a ``UnitResult``."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from quickfire.domain.models import UnitResult, UnitStatus
from quickfire.matchers.context import MessageProducer, Outcome, OutcomeStatus
from quickfire.matchers.expectation import Expectation

if TYPE_CHECKING:
    from quickfire.domain.models import TestUnit
    from quickfire.matchers.registry import MatcherRegistry


class UnitContext:
    """Handle passed to a test body.

    ``expect(value).<matcher>(...)`` dispatches through the registry. The
    direct ``assert_that``/``refute_that``/``failure``/``success`` helpers record
    outcomes without going through a matcher. Failures are recorded and the
    body keeps running; only an unexpected exception ends the unit early.
    """

    __slots__ = ("_outcomes", "_registry", "_unit_id")

    def __init__(self, registry: MatcherRegistry, *, unit_id: str) -> None:
        self._registry = registry
        self._unit_id = unit_id
        self._outcomes: list[Outcome] = []

    @property
    def unit_id(self) -> str:
        return self._unit_id

    @property
    def outcomes(self) -> tuple[Outcome, ...]:
        return tuple(self._outcomes)

    @property
    def assertions(self) -> int:
        return len(self._outcomes)

    @property
    def failures(self) -> tuple[str, ...]:
        return tuple(
            outcome.message or "failed" for outcome in self._outcomes if outcome.failed
        )

    def expect(self, value: object) -> Expectation:
        return Expectation(value, self._registry, self._record)

    def assert_that(
        self, predicate: object, message: MessageProducer = "expected value to be truthy"
    ) -> bool:
        if predicate:
            self._record(Outcome(OutcomeStatus.PASSED))
            return True
        self._record(Outcome(OutcomeStatus.FAILED, message=_render(message)))
        return False

    def refute_that(
        self, predicate: object, message: MessageProducer = "expected value to be falsy"
    ) -> bool:
        return self.assert_that(not predicate, message)

    def failure(self, message: MessageProducer = "failed") -> None:
        self._record(Outcome(OutcomeStatus.FAILED, message=_render(message)))

    def success(self) -> None:
        self._record(Outcome(OutcomeStatus.PASSED))

    def _record(self, outcome: Outcome) -> None:
        self._outcomes.append(outcome)


def run_unit(
    unit: TestUnit,
    registry: MatcherRegistry,
    *,
    shard_index: int = 0,
    position: int = 0,
    require_assertions: bool = False,
) -> UnitResult:
    """Execute ``unit.body`` and classify the result.

    Any exception other than ``KeyboardInterrupt`` escaping the body makes
    the unit errored; messages from failures recorded before the exception
    are kept. Otherwise any failed outcome makes the unit failed.
    """

    context = UnitContext(registry, unit_id=unit.unit_id)
    started = time.perf_counter()
    error: BaseException | None = None
    try:
        unit.body(context)
    except KeyboardInterrupt:
        raise
    except BaseException as exc:
        # SystemExit and GeneratorExit from a body end that unit only.
        error = exc
    duration = time.perf_counter() - started

    messages = list(context.failures)
    if error is not None:
        messages.append(f"{type(error).__name__}: {error}")
        status = UnitStatus.ERRORED
    elif messages:
        status = UnitStatus.FAILED
    elif require_assertions and context.assertions == 0:
        messages.append(f"`{unit.unit_id}` made no assertions")
        status = UnitStatus.FAILED
    else:
        status = UnitStatus.PASSED

    return UnitResult(
        unit_id=unit.unit_id,
        status=status,
        messages=tuple(messages),
        assertions=context.assertions,
        duration_seconds=duration,
        shard_index=shard_index,
        position=position,
        error_type=type(error).__name__ if error is not None else None,
    )


def cancelled_result(unit: TestUnit, *, shard_index: int, position: int) -> UnitResult:
    return UnitResult(
        unit_id=unit.unit_id,
        status=UnitStatus.CANCELLED,
        messages=("cancelled before start",),
        shard_index=shard_index,
        position=position,
    )


def _render(message: MessageProducer) -> str:
    if callable(message):
        return str(message())
    return str(message)


__all__ = ["UnitContext", "cancelled_result", "run_unit"]
