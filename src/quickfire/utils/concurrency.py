"""Thread/process concurrency primitives used by the scheduler and shard workers."""

from __future__ import annotations

import threading
from concurrent.futures import FIRST_COMPLETED, CancelledError, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, Protocol, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from multiprocessing.context import BaseContext

T = TypeVar("T")
R = TypeVar("R")


class _EventLike(Protocol):
    def set(self) -> None: ...

    def is_set(self) -> bool: ...

    def wait(self, timeout: float | None = None) -> bool: ...


class CancellationToken:
    """Cooperative cancellation token backed by a thread or process event."""

    __slots__ = ("_event",)

    def __init__(self, event: _EventLike | None = None) -> None:
        self._event: _EventLike = event if event is not None else threading.Event()

    @classmethod
    def for_processes(cls, context: BaseContext) -> CancellationToken:
        """Token whose state is visible to worker processes started from ``context``."""

        return cls(context.Event())

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError("operation cancelled")


def partition(items: Sequence[T], count: int) -> list[list[T]]:
    """Split ``items`` into at most ``count`` contiguous shards balanced by size.

    Shard sizes differ by at most one and the original order is kept; no
    shard is empty.
    """

    if count <= 0:
        raise ValueError("count must be > 0")
    total = len(items)
    shards = min(count, total)
    if shards == 0:
        return []

    base, extra = divmod(total, shards)
    out: list[list[T]] = []
    start = 0
    for index in range(shards):
        size = base + (1 if index < extra else 0)
        out.append(list(items[start : start + size]))
        start += size
    return out


@dataclass(slots=True)
class WorkerPool(Generic[T, R]):
    """Run a handler over items on a bounded thread pool.

    Items are submitted in order, so each thread picks up work in partition
    order. Results are yielded on the calling thread as they finish. Items
    not yet started when the token is cancelled go to ``on_cancelled``.
    """

    max_concurrency: int
    cancel_token: CancellationToken | None = None
    thread_name_prefix: str = "quickfire-worker"
    _token: CancellationToken = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.max_concurrency <= 0:
            raise ValueError("max_concurrency must be > 0")
        self._token = self.cancel_token or CancellationToken()

    @property
    def token(self) -> CancellationToken:
        return self._token

    def run(
        self,
        items: Sequence[T],
        handler: Callable[[int, T], R],
        *,
        on_cancelled: Callable[[int, T], R],
    ) -> Iterator[R]:
        if not items:
            return

        def run_one(index: int, item: T) -> R:
            if self._token.is_cancelled:
                return on_cancelled(index, item)
            return handler(index, item)

        workers = min(self.max_concurrency, len(items))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=self.thread_name_prefix
        ) as executor:
            pending: set[Future[R]] = {
                executor.submit(run_one, index, item) for index, item in enumerate(items)
            }
            try:
                while pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        yield future.result()
            except BaseException:
                for future in pending:
                    future.cancel()
                raise


__all__ = [
    "CancellationToken",
    "WorkerPool",
    "partition",
]
