"""
quickfire — parallel execution core for a matcher-based test framework.

File: src/quickfire/__init__.py

Purpose
- Register named matchers against subject types and dispatch ``expect(x).name(...)``.
- Run suites of test units across forked worker processes and threads.
- Aggregate outcomes into an order-stable ``RunReport``.
"""

from quickfire.config.runtime import Configuration, ConfigurationFrozenError
from quickfire.domain.models import RunReport, TestUnit, UnitResult, UnitStatus
from quickfire.execution.scheduler import Scheduler
from quickfire.execution.unit_runner import UnitContext
from quickfire.matchers.registry import MatcherRegistry
from quickfire.suite import Suite

__version__ = "0.1.0"

__all__ = [
    "Configuration",
    "ConfigurationFrozenError",
    "MatcherRegistry",
    "RunReport",
    "Scheduler",
    "Suite",
    "TestUnit",
    "UnitContext",
    "UnitResult",
    "UnitStatus",
    "__version__",
]
