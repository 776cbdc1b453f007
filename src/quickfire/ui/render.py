"""Plain-text progress and summary rendering for quickfire runs.

File: src/quickfire/ui/render.py

Purpose
- Emit one configured symbol per unit outcome as results stream in.
- Print a deterministic end-of-run summary: counts, non-passing entries, and a
  celebration glyph when the run is clean.

Functional requirements
- Plain-text rendering must always work without external dependencies.
- The glyph choice is driven by an injectable ``random.Random`` so output is reproducible.
"""

from __future__ import annotations

import random
import sys
from typing import TYPE_CHECKING, TextIO

from quickfire.domain.models import UnitStatus

if TYPE_CHECKING:
    from quickfire.config.runtime import Configuration
    from quickfire.domain.models import RunReport, UnitResult


class ReportRenderer:
    """Writes outcome symbols and the run summary to ``stream``."""

    def __init__(
        self,
        configuration: Configuration,
        stream: TextIO | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._configuration = configuration
        self._stream = stream if stream is not None else sys.stdout
        self._rng = rng if rng is not None else random.Random()
        self._emitted = 0

    @property
    def emitted(self) -> int:
        return self._emitted

    def outcome(self, result: UnitResult) -> None:
        """Print the success or failure symbol for one unit; usable as ``on_result``."""

        if result.status.is_failure:
            symbol = self._configuration.failure_symbol
        elif result.status is UnitStatus.PASSED:
            symbol = self._configuration.success_symbol
        else:
            symbol = "·"
        print(symbol, end="", file=self._stream, flush=True)
        self._emitted += 1

    def summary(self, report: RunReport) -> None:
        if self._emitted:
            print(file=self._stream)

        for loss in report.worker_losses:
            print(f"  Warning: {loss.description}", file=self._stream)

        for entry in report.entries:
            print(f"\n{entry.status.value.upper()}  {entry.unit_id}", file=self._stream)
            if entry.message:
                for line in entry.message.splitlines():
                    print(f"  {line}", file=self._stream)

        counts = report.counts()
        parts = [f"{counts['passed']} passed", f"{counts['failed']} failed"]
        for key in ("errored", "cancelled", "lost"):
            if counts[key]:
                parts.append(f"{counts[key]} {key}")
        line = ", ".join(parts) + f" in {report.duration_seconds:.2f}s"
        if report.ok and report.total:
            line = f"{line} {self._rng.choice(self._configuration.success_glyphs)}"
        print(f"\n{line}", file=self._stream)


__all__ = ["ReportRenderer"]
