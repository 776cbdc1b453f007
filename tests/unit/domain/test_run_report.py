"""Unit tests for unit results, worker losses and run report aggregation."""

from __future__ import annotations

import pickle

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from quickfire.domain.models import (
    ReportEntry,
    RunReport,
    TestUnit,
    UnitResult,
    UnitStatus,
    WorkerLoss,
)


def _result(unit_id: str, status: UnitStatus, shard: int = 0, position: int = 0) -> UnitResult:
    messages = () if status is UnitStatus.PASSED else (f"{unit_id} {status.value}",)
    return UnitResult(
        unit_id=unit_id,
        status=status,
        messages=messages,
        shard_index=shard,
        position=position,
    )


def test_test_unit_identifier_and_validation() -> None:
    unit = TestUnit(name="adds numbers", body=lambda context: None, location="math.py:3")

    assert unit.unit_id == "math.py:3 adds numbers"
    assert TestUnit(name="bare", body=lambda context: None).unit_id == "bare"
    with pytest.raises(ValueError, match="non-empty"):
        TestUnit(name=" ", body=lambda context: None)
    with pytest.raises(ValueError, match="callable"):
        TestUnit(name="x", body=None)  # type: ignore[arg-type]


def test_unit_result_rejects_negative_fields_and_pickles() -> None:
    with pytest.raises(ValueError, match="assertions"):
        UnitResult(unit_id="a", status=UnitStatus.PASSED, assertions=-1)

    result = _result("a", UnitStatus.FAILED, shard=2, position=1)
    assert pickle.loads(pickle.dumps(result)) == result
    assert result.order_key == (2, 1)


def test_report_orders_by_shard_then_position() -> None:
    results = [
        _result("c", UnitStatus.PASSED, shard=1, position=0),
        _result("b", UnitStatus.FAILED, shard=0, position=1),
        _result("a", UnitStatus.PASSED, shard=0, position=0),
    ]

    report = RunReport.from_results(results)

    assert [result.unit_id for result in report.results] == ["a", "b", "c"]
    assert report.entries == (ReportEntry("b", UnitStatus.FAILED, "b failed"),)
    assert report.failure_messages == ("b failed",)


def test_ok_and_exit_code() -> None:
    clean = RunReport.from_results(
        [_result("a", UnitStatus.PASSED), _result("b", UnitStatus.CANCELLED, position=1)]
    )
    lost = RunReport.from_results([_result("a", UnitStatus.LOST)])
    errored = RunReport.from_results([_result("a", UnitStatus.ERRORED)])

    assert clean.ok and clean.exit_code == 0
    assert clean.cancelled == 1
    assert not lost.ok and lost.exit_code == 1
    assert not errored.ok and errored.exit_code == 1


def test_worker_loss_alone_fails_the_run() -> None:
    loss = WorkerLoss(shard_index=1, exitcode=-9, unit_ids=("x",))

    report = RunReport.from_results([], worker_losses=[loss])

    assert not report.ok
    assert loss.description == "worker for shard 1 exited from signal 9"
    assert WorkerLoss(0, 3, ()).description == "worker for shard 0 exited with code 3"
    assert "unknown" in WorkerLoss(0, None, ()).description


@settings(max_examples=100, deadline=None)
@given(statuses=st.lists(st.sampled_from(list(UnitStatus)), max_size=40))
def test_counts_always_sum_to_total(statuses: list[UnitStatus]) -> None:
    results = [
        _result(f"u{index}", status, position=index) for index, status in enumerate(statuses)
    ]

    report = RunReport.from_results(results)

    assert sum(report.counts().values()) == report.total == len(statuses)
    failing = report.failed + report.errored + report.lost
    assert (report.exit_code != 0) == (failing > 0)
