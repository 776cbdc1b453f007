"""Thread-safe collection of unit results into a ``RunReport``."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from quickfire.domain.models import RunReport

if TYPE_CHECKING:
    from quickfire.domain.models import UnitResult, WorkerLoss

ResultObserver = Callable[["UnitResult"], None]


class ReportAggregator:
    """Collects results from any thread; each record is applied atomically.

    ``on_result`` is called under the lock so observers see results one at a
    time and never interleaved.
    """

    __slots__ = ("_lock", "_losses", "_on_result", "_results")

    def __init__(self, *, on_result: ResultObserver | None = None) -> None:
        self._lock = threading.Lock()
        self._results: dict[tuple[int, int], UnitResult] = {}
        self._losses: list[WorkerLoss] = []
        self._on_result = on_result

    def record(self, result: UnitResult) -> None:
        with self._lock:
            key = result.order_key
            if key in self._results:
                raise ValueError(
                    f"duplicate result for shard {key[0]} position {key[1]} ({result.unit_id})"
                )
            self._results[key] = result
            if self._on_result is not None:
                self._on_result(result)

    def record_loss(self, loss: WorkerLoss) -> None:
        with self._lock:
            self._losses.append(loss)

    def has_result(self, shard_index: int, position: int) -> bool:
        with self._lock:
            return (shard_index, position) in self._results

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def finalize(self, *, duration_seconds: float = 0.0) -> RunReport:
        with self._lock:
            return RunReport.from_results(
                self._results.values(),
                worker_losses=self._losses,
                duration_seconds=duration_seconds,
            )


__all__ = ["ReportAggregator", "ResultObserver"]
