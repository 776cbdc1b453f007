"""Execution: unit runner, shard workers, result aggregation and the parallel scheduler."""

from quickfire.execution.aggregator import ReportAggregator, ResultObserver
from quickfire.execution.scheduler import Scheduler, SchedulerState, SchedulerStateError
from quickfire.execution.unit_runner import UnitContext, cancelled_result, run_unit
from quickfire.execution.worker import run_shard, shard_process_main

__all__ = [
    "ReportAggregator",
    "ResultObserver",
    "Scheduler",
    "SchedulerState",
    "SchedulerStateError",
    "UnitContext",
    "cancelled_result",
    "run_shard",
    "run_unit",
    "shard_process_main",
]
