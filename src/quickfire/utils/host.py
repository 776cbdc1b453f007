"""Host capability query used to pick the default worker-process count."""

from __future__ import annotations

import multiprocessing
import os
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class HostCapabilities:
    """What the host offers for parallel execution."""

    supports_forking: bool
    usable_cores: int

    def __post_init__(self) -> None:
        if isinstance(self.usable_cores, bool) or not isinstance(self.usable_cores, int):
            raise ValueError(
                f"usable_cores must be an integer, got {type(self.usable_cores).__name__}"
            )
        if self.usable_cores < 1:
            raise ValueError("usable_cores must be >= 1")

    @property
    def default_processes(self) -> int:
        return self.usable_cores if self.supports_forking else 1


def supports_forking() -> bool:
    """Return whether independent worker processes can be forked."""

    if not hasattr(os, "fork"):
        return False
    return "fork" in multiprocessing.get_all_start_methods()


def non_blocking_cores() -> int:
    """Return the parallelism hint for this process.

    Prefers the cores this process may actually be scheduled on over the
    machine-wide count.
    """

    process_cpu_count = getattr(os, "process_cpu_count", None)
    if process_cpu_count is not None:
        count = process_cpu_count()
        if count:
            return max(1, count)
    sched_getaffinity = getattr(os, "sched_getaffinity", None)
    if sched_getaffinity is not None:
        try:
            return max(1, len(sched_getaffinity(0)))
        except OSError:
            pass
    return max(1, os.cpu_count() or 1)


def detect_host() -> HostCapabilities:
    return HostCapabilities(supports_forking=supports_forking(), usable_cores=non_blocking_cores())


__all__ = [
    "HostCapabilities",
    "detect_host",
    "non_blocking_cores",
    "supports_forking",
]
