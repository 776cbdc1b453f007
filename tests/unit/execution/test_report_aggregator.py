"""Unit tests for thread-safe result aggregation."""

from __future__ import annotations

import threading

import pytest

from quickfire.domain.models import UnitResult, UnitStatus, WorkerLoss
from quickfire.execution.aggregator import ReportAggregator


def _result(shard: int, position: int, status: UnitStatus = UnitStatus.PASSED) -> UnitResult:
    return UnitResult(
        unit_id=f"s{shard}p{position}", status=status, shard_index=shard, position=position
    )


def test_finalize_orders_results_and_keeps_losses() -> None:
    observed: list[str] = []
    aggregator = ReportAggregator(on_result=lambda result: observed.append(result.unit_id))

    aggregator.record(_result(1, 0))
    aggregator.record(_result(0, 1, UnitStatus.FAILED))
    aggregator.record(_result(0, 0))
    aggregator.record_loss(WorkerLoss(shard_index=2, exitcode=1, unit_ids=()))

    report = aggregator.finalize(duration_seconds=1.5)

    assert observed == ["s1p0", "s0p1", "s0p0"]
    assert [result.unit_id for result in report.results] == ["s0p0", "s0p1", "s1p0"]
    assert report.duration_seconds == 1.5
    assert len(report.worker_losses) == 1
    assert aggregator.has_result(0, 1)
    assert not aggregator.has_result(3, 0)


def test_duplicate_result_is_rejected() -> None:
    aggregator = ReportAggregator()
    aggregator.record(_result(0, 0))

    with pytest.raises(ValueError, match="duplicate result"):
        aggregator.record(_result(0, 0, UnitStatus.FAILED))


def test_concurrent_records_are_all_kept() -> None:
    in_observer = threading.Lock()
    overlaps: list[int] = []

    def observer(result: UnitResult) -> None:
        if not in_observer.acquire(blocking=False):
            overlaps.append(result.position)
            return
        in_observer.release()

    aggregator = ReportAggregator(on_result=observer)

    def record_shard(shard: int) -> None:
        for position in range(50):
            aggregator.record(_result(shard, position))

    threads = [threading.Thread(target=record_shard, args=(shard,)) for shard in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(aggregator) == 200
    assert overlaps == []
    assert aggregator.finalize().passed == 200
