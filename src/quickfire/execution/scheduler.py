"""
quickfire — parallel scheduler.

File: src/quickfire/execution/scheduler.py

Purpose
- Partition test units into shards, run each shard on a thread pool (inline or
  in a forked worker process), and aggregate results into one ``RunReport``.

What is included in this file
- ``Scheduler`` with the idle -> scheduling -> running -> aggregating -> done lifecycle.
- Worker-process supervision over pipes, including lost-worker detection.
- Fail-fast and external cancellation through a shared ``CancellationToken``.

Functional requirements
- Every unit ends in exactly one result: passed, failed, errored, cancelled or lost.
- Reports are ordered by shard index then partition position, independent of timing.
- A worker that exits without reporting completion only affects its own shard,
  unless ``abort_on_worker_lost`` is set.
"""

from __future__ import annotations

import multiprocessing
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from multiprocessing.connection import wait as wait_connections
from typing import TYPE_CHECKING, Any, cast

import structlog
from structlog.contextvars import bound_contextvars

from quickfire.domain.models import UnitResult, UnitStatus, WorkerLoss
from quickfire.execution.aggregator import ReportAggregator, ResultObserver
from quickfire.execution.worker import DONE_MESSAGE, RESULT_MESSAGE, run_shard, shard_process_main
from quickfire.utils.concurrency import CancellationToken, partition

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from multiprocessing.connection import Connection
    from multiprocessing.process import BaseProcess

    from quickfire.config.runtime import Configuration
    from quickfire.domain.models import RunReport, TestUnit


class SchedulerState(StrEnum):
    IDLE = "idle"
    SCHEDULING = "scheduling"
    RUNNING = "running"
    AGGREGATING = "aggregating"
    DONE = "done"


_ACTIVE_STATES = frozenset(
    {SchedulerState.SCHEDULING, SchedulerState.RUNNING, SchedulerState.AGGREGATING}
)


class SchedulerStateError(RuntimeError):
    """Raised when ``run`` is called while a run is already in progress."""


@dataclass(slots=True)
class _ShardHandle:
    shard_index: int
    units: Sequence[TestUnit]
    process: BaseProcess
    reported: set[int] = field(default_factory=set)


class Scheduler:
    """Runs test units across worker processes and threads.

    The configuration (and its matcher registry) is frozen when scheduling
    begins. ``on_result`` observes each unit result as it arrives, one at a
    time, on the coordinator.
    """

    def __init__(
        self,
        configuration: Configuration,
        *,
        on_result: ResultObserver | None = None,
        logger: Any | None = None,
    ) -> None:
        self._configuration = configuration
        self._on_result = on_result
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._state = SchedulerState.IDLE
        self._state_lock = threading.Lock()
        self._token: CancellationToken | None = None
        self._cancel_pending = False

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    def cancel(self) -> None:
        """Cancel the active run; units that have not started are recorded as cancelled."""

        with self._state_lock:
            if self._state not in _ACTIVE_STATES:
                self._logger.debug("quickfire_cancel_ignored", state=self._state.value)
                return
            self._logger.info("quickfire_run_cancel_requested")
            if self._token is None:
                # Applied once _run creates the token.
                self._cancel_pending = True
            else:
                self._token.cancel()

    def run(self, units: Iterable[TestUnit]) -> RunReport:
        with self._state_lock:
            if self._state in _ACTIVE_STATES:
                raise SchedulerStateError(f"scheduler is already {self._state.value}")
            self._state = SchedulerState.SCHEDULING
            self._cancel_pending = False

        run_id = uuid.uuid4().hex[:12]
        try:
            with bound_contextvars(run_id=run_id):
                return self._run(tuple(units))
        finally:
            self._token = None
            self._state = SchedulerState.DONE

    def _run(self, units: tuple[TestUnit, ...]) -> RunReport:
        configuration = self._configuration
        configuration.freeze()
        started = time.perf_counter()

        shards = partition(units, configuration.processes) if units else []
        host = configuration.host
        inline = len(shards) <= 1 or not host.supports_forking
        if configuration.processes > 1 and not host.supports_forking:
            self._logger.warning(
                "quickfire_forking_unavailable",
                processes=configuration.processes,
                detail="running shards sequentially in the coordinator process",
            )

        aggregator = ReportAggregator(on_result=self._on_result)
        if inline:
            token = CancellationToken()
            context = None
        else:
            context = multiprocessing.get_context("fork")
            token = CancellationToken.for_processes(context)
        with self._state_lock:
            self._token = token
            if self._cancel_pending:
                token.cancel()

        self._logger.info(
            "quickfire_run_started",
            units=len(units),
            shards=len(shards),
            processes=configuration.processes,
            threads=configuration.threads,
            mode="inline" if inline else "processes",
        )

        self._state = SchedulerState.RUNNING
        if context is None:
            self._run_inline(shards, token, aggregator)
        else:
            self._run_processes(context, shards, token, aggregator)

        self._state = SchedulerState.AGGREGATING
        report = aggregator.finalize(duration_seconds=time.perf_counter() - started)
        self._logger.info(
            "quickfire_run_finished",
            counts=report.counts(),
            worker_losses=len(report.worker_losses),
            duration_seconds=round(report.duration_seconds, 6),
            ok=report.ok,
        )
        return report

    def _run_inline(
        self,
        shards: Sequence[Sequence[TestUnit]],
        token: CancellationToken,
        aggregator: ReportAggregator,
    ) -> None:
        configuration = self._configuration
        for shard_index, shard in enumerate(shards):
            run_shard(
                shard_index,
                shard,
                configuration.registry,
                threads=configuration.threads,
                token=token,
                emit=lambda result: self._accept(result, token, aggregator),
                fail_fast=configuration.fail_fast,
                require_assertions=configuration.require_assertions,
                logger=self._logger,
            )

    def _run_processes(
        self,
        context: Any,
        shards: Sequence[Sequence[TestUnit]],
        token: CancellationToken,
        aggregator: ReportAggregator,
    ) -> None:
        configuration = self._configuration
        handles: dict[Connection, _ShardHandle] = {}
        try:
            for shard_index, shard in enumerate(shards):
                reader, writer = context.Pipe(duplex=False)
                process = context.Process(
                    target=shard_process_main,
                    name=f"quickfire-shard-{shard_index}",
                    args=(shard_index, shard, configuration.registry, writer),
                    kwargs={
                        "threads": configuration.threads,
                        "token": token,
                        "fail_fast": configuration.fail_fast,
                        "require_assertions": configuration.require_assertions,
                    },
                    daemon=True,
                )
                process.start()
                writer.close()
                handles[reader] = _ShardHandle(shard_index, shard, process)
                self._logger.debug(
                    "quickfire_worker_started", shard_index=shard_index, pid=process.pid
                )

            while handles:
                ready = cast("list[Connection]", wait_connections(list(handles)))
                for connection in ready:
                    handle = handles[connection]
                    try:
                        kind, payload = connection.recv()
                    except EOFError:
                        del handles[connection]
                        connection.close()
                        handle.process.join()
                        self._worker_lost(handle, token, aggregator)
                        continue
                    if kind == RESULT_MESSAGE:
                        handle.reported.add(payload.position)
                        self._accept(payload, token, aggregator)
                    elif kind == DONE_MESSAGE:
                        del handles[connection]
                        connection.close()
                        handle.process.join()
        finally:
            for connection, handle in handles.items():
                connection.close()
                if handle.process.is_alive():
                    handle.process.terminate()
                handle.process.join()

    def _accept(
        self, result: UnitResult, token: CancellationToken, aggregator: ReportAggregator
    ) -> None:
        aggregator.record(result)
        if self._configuration.fail_fast and result.status.is_failure:
            token.cancel()

    def _worker_lost(
        self,
        handle: _ShardHandle,
        token: CancellationToken,
        aggregator: ReportAggregator,
    ) -> None:
        missing = [
            (position, unit)
            for position, unit in enumerate(handle.units)
            if position not in handle.reported
        ]
        loss = WorkerLoss(
            shard_index=handle.shard_index,
            exitcode=handle.process.exitcode,
            unit_ids=tuple(unit.unit_id for _, unit in missing),
        )
        self._logger.error(
            "quickfire_worker_lost",
            shard_index=handle.shard_index,
            exitcode=loss.exitcode,
            unreported=len(missing),
        )
        aggregator.record_loss(loss)
        for position, unit in missing:
            self._accept(
                UnitResult(
                    unit_id=unit.unit_id,
                    status=UnitStatus.LOST,
                    messages=(loss.description,),
                    shard_index=handle.shard_index,
                    position=position,
                ),
                token,
                aggregator,
            )
        if self._configuration.abort_on_worker_lost:
            self._logger.warning("quickfire_run_aborted", shard_index=handle.shard_index)
            token.cancel()


__all__ = ["Scheduler", "SchedulerState", "SchedulerStateError"]
