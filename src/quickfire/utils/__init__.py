"""Utility exports for host capability and concurrency helpers."""

from quickfire.utils.concurrency import CancellationToken, WorkerPool, partition
from quickfire.utils.host import (
    HostCapabilities,
    detect_host,
    non_blocking_cores,
    supports_forking,
)

__all__ = [
    "CancellationToken",
    "HostCapabilities",
    "WorkerPool",
    "detect_host",
    "non_blocking_cores",
    "partition",
    "supports_forking",
]
