"""Domain types shared by the scheduler, the aggregator and reporting."""

from quickfire.domain.models import (
    ReportEntry,
    RunReport,
    TestBody,
    TestUnit,
    UnitResult,
    UnitStatus,
    WorkerLoss,
)

__all__ = [
    "ReportEntry",
    "RunReport",
    "TestBody",
    "TestUnit",
    "UnitResult",
    "UnitStatus",
    "WorkerLoss",
]
