"""Shard execution: a thread pool over one shard, inline or in a forked worker process."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog
from structlog.contextvars import bind_contextvars

from quickfire.execution.unit_runner import cancelled_result, run_unit
from quickfire.utils.concurrency import WorkerPool

if TYPE_CHECKING:
    from collections.abc import Sequence
    from multiprocessing.connection import Connection

    from quickfire.domain.models import TestUnit, UnitResult
    from quickfire.matchers.registry import MatcherRegistry
    from quickfire.utils.concurrency import CancellationToken

ResultSink = Callable[["UnitResult"], None]

# Messages a worker process sends to the coordinator.
RESULT_MESSAGE = "result"
DONE_MESSAGE = "done"


def run_shard(
    shard_index: int,
    units: Sequence[TestUnit],
    registry: MatcherRegistry,
    *,
    threads: int,
    token: CancellationToken,
    emit: ResultSink,
    fail_fast: bool = False,
    require_assertions: bool = False,
    logger: Any | None = None,
) -> int:
    """Run ``units`` on ``min(threads, len(units))`` threads, in partition order.

    ``emit`` is called once per unit on the calling thread. Units that have
    not started when ``token`` is cancelled are emitted as cancelled. Returns
    the number of results emitted.
    """

    log = logger if logger is not None else structlog.get_logger(__name__)
    if not units:
        return 0

    def handle(position: int, unit: TestUnit) -> UnitResult:
        result = run_unit(
            unit,
            registry,
            shard_index=shard_index,
            position=position,
            require_assertions=require_assertions,
        )
        # Cancel before this thread picks up its next unit.
        if fail_fast and result.status.is_failure and not token.is_cancelled:
            log.info(
                "quickfire_fail_fast_triggered",
                shard_index=shard_index,
                unit_id=result.unit_id,
                status=result.status.value,
            )
            token.cancel()
        return result

    def skip(position: int, unit: TestUnit) -> UnitResult:
        return cancelled_result(unit, shard_index=shard_index, position=position)

    pool: WorkerPool[TestUnit, UnitResult] = WorkerPool(
        max_concurrency=threads,
        cancel_token=token,
        thread_name_prefix=f"quickfire-shard-{shard_index}",
    )
    emitted = 0
    for result in pool.run(units, handle, on_cancelled=skip):
        emit(result)
        emitted += 1
    log.debug("quickfire_shard_finished", shard_index=shard_index, results=emitted)
    return emitted


def shard_process_main(
    shard_index: int,
    units: Sequence[TestUnit],
    registry: MatcherRegistry,
    connection: Connection,
    *,
    threads: int,
    token: CancellationToken,
    fail_fast: bool = False,
    require_assertions: bool = False,
) -> None:
    """Entry point of a forked worker process.

    Streams ``("result", UnitResult)`` messages and finishes with
    ``("done", shard_index)``. A process that exits without the final message
    is treated as lost by the coordinator.
    """

    send_lock = threading.Lock()

    def send(result: UnitResult) -> None:
        with send_lock:
            connection.send((RESULT_MESSAGE, result))

    bind_contextvars(shard_index=shard_index)
    try:
        run_shard(
            shard_index,
            units,
            registry,
            threads=threads,
            token=token,
            emit=send,
            fail_fast=fail_fast,
            require_assertions=require_assertions,
        )
        with send_lock:
            connection.send((DONE_MESSAGE, shard_index))
    finally:
        connection.close()


__all__ = [
    "DONE_MESSAGE",
    "RESULT_MESSAGE",
    "ResultSink",
    "run_shard",
    "shard_process_main",
]
