"""Dataclass domain models for test units, unit results and run reports."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from quickfire.execution.unit_runner import UnitContext

TestBody = Callable[["UnitContext"], object]


class UnitStatus(StrEnum):
    """Terminal status of one test unit within a run."""

    PASSED = "passed"
    FAILED = "failed"
    ERRORED = "errored"
    CANCELLED = "cancelled"
    LOST = "lost"

    @property
    def is_failure(self) -> bool:
        return self in _FAILING_STATUSES


_FAILING_STATUSES = frozenset({UnitStatus.FAILED, UnitStatus.ERRORED, UnitStatus.LOST})


@dataclass(frozen=True, slots=True)
class TestUnit:
    """One test case: a named body invoked with a ``UnitContext``."""

    __test__ = False

    name: str
    body: TestBody
    location: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("test unit name must be a non-empty string")
        if not callable(self.body):
            raise ValueError(f"test unit body must be callable, got {type(self.body).__name__}")

    @property
    def unit_id(self) -> str:
        if self.location:
            return f"{self.location} {self.name}"
        return self.name


@dataclass(frozen=True, slots=True)
class UnitResult:
    """Outcome of running one unit; plain data so it can cross process boundaries."""

    unit_id: str
    status: UnitStatus
    messages: tuple[str, ...] = ()
    assertions: int = 0
    duration_seconds: float = 0.0
    shard_index: int = 0
    position: int = 0
    error_type: str | None = None

    def __post_init__(self) -> None:
        if self.assertions < 0:
            raise ValueError("assertions must be >= 0")
        if self.duration_seconds < 0:
            raise ValueError("duration_seconds must be >= 0")
        if self.shard_index < 0:
            raise ValueError("shard_index must be >= 0")
        if self.position < 0:
            raise ValueError("position must be >= 0")

    @property
    def order_key(self) -> tuple[int, int]:
        return (self.shard_index, self.position)

    @property
    def message(self) -> str:
        return "\n".join(self.messages)


@dataclass(frozen=True, slots=True)
class ReportEntry:
    """Identifier and message of one non-passing unit."""

    unit_id: str
    status: UnitStatus
    message: str


@dataclass(frozen=True, slots=True)
class WorkerLoss:
    """A worker process that terminated before reporting its whole shard."""

    shard_index: int
    exitcode: int | None
    unit_ids: tuple[str, ...]

    @property
    def description(self) -> str:
        if self.exitcode is None:
            detail = "with an unknown exit status"
        elif self.exitcode < 0:
            detail = f"from signal {-self.exitcode}"
        else:
            detail = f"with code {self.exitcode}"
        return f"worker for shard {self.shard_index} exited {detail}"


@dataclass(frozen=True, slots=True)
class RunReport:
    """Aggregated, order-stable result of an entire run."""

    results: tuple[UnitResult, ...] = ()
    worker_losses: tuple[WorkerLoss, ...] = ()
    duration_seconds: float = 0.0
    _counts: dict[UnitStatus, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        counts = dict.fromkeys(UnitStatus, 0)
        for result in self.results:
            counts[result.status] += 1
        object.__setattr__(self, "_counts", counts)

    @property
    def passed(self) -> int:
        return self._counts[UnitStatus.PASSED]

    @property
    def failed(self) -> int:
        return self._counts[UnitStatus.FAILED]

    @property
    def errored(self) -> int:
        return self._counts[UnitStatus.ERRORED]

    @property
    def cancelled(self) -> int:
        return self._counts[UnitStatus.CANCELLED]

    @property
    def lost(self) -> int:
        return self._counts[UnitStatus.LOST]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def entries(self) -> tuple[ReportEntry, ...]:
        """Non-passing units in report order."""

        return tuple(
            ReportEntry(unit_id=result.unit_id, status=result.status, message=result.message)
            for result in self.results
            if result.status is not UnitStatus.PASSED
        )

    @property
    def failure_messages(self) -> tuple[str, ...]:
        return tuple(
            message
            for result in self.results
            if result.status.is_failure
            for message in result.messages
        )

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.errored == 0 and self.lost == 0 and not self.worker_losses

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def counts(self) -> dict[str, int]:
        return {status.value: self._counts[status] for status in UnitStatus}

    @classmethod
    def from_results(
        cls,
        results: Iterable[UnitResult],
        *,
        worker_losses: Iterable[WorkerLoss] = (),
        duration_seconds: float = 0.0,
    ) -> RunReport:
        ordered = tuple(sorted(results, key=lambda result: result.order_key))
        losses = tuple(sorted(worker_losses, key=lambda loss: loss.shard_index))
        return cls(results=ordered, worker_losses=losses, duration_seconds=duration_seconds)


__all__ = [
    "ReportEntry",
    "RunReport",
    "TestBody",
    "TestUnit",
    "UnitResult",
    "UnitStatus",
    "WorkerLoss",
]
