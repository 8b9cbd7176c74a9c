"""TAP (Test Anything Protocol) output for check results."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Optional, TextIO

from .models import CheckResult, Outcome


class PlanError(RuntimeError):
    """Raised when a plan is declared twice or after results were emitted."""


@dataclass(frozen=True)
class TapSummary:
    """Counts for a finished TAP run."""

    planned: Optional[int]
    run: int
    passed: int
    failed: int
    skipped: int

    @property
    def ok(self) -> bool:
        if self.failed:
            return False
        return self.planned is None or self.planned == self.run


class TapReporter:
    """Numbers results and writes them as TAP.

    Results go to ``stream``; diagnostics go to ``diag_stream`` prefixed with
    ``#``. With no declared plan the ``1..N`` line is written by
    :meth:`finalize`.
    """

    def __init__(self, stream: TextIO | None = None, diag_stream: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.diag_stream = diag_stream if diag_stream is not None else sys.stderr
        self.planned: Optional[int] = None
        self.no_plan = False
        self.count = 0
        self.passed = 0
        self.failed = 0
        self.skipped = 0
        self._finalized = False

    @property
    def has_plan(self) -> bool:
        return self.planned is not None or self.no_plan

    def plan(self, tests: int) -> None:
        if self.has_plan:
            raise PlanError("You tried to plan twice")
        if self.count:
            raise PlanError("A plan must be declared before any result is emitted")
        if tests < 0:
            raise PlanError(f"Number of tests must be a positive integer, got {tests}")
        self.planned = tests
        self._write(f"1..{tests}")

    def ensure_plan(self) -> None:
        """Fall back to no-plan mode unless a plan was declared."""
        if not self.has_plan:
            self.no_plan = True

    def record(self, result: CheckResult) -> bool:
        """Emit *result* and return whether it counts as passing."""
        self.count += 1
        if result.outcome is Outcome.SKIP:
            self.skipped += 1
            reason = f" {result.diagnostic}" if result.diagnostic else ""
            self._write(f"ok {self.count} # skip{reason}")
            return True
        if result.outcome is Outcome.PASS:
            self.passed += 1
            self._write(f"ok {self.count} - {result.label}")
            return True

        self.failed += 1
        self._write(f"not ok {self.count} - {result.label}")
        self.diag(f"  Failed test '{result.label}'")
        if result.diagnostic:
            self.diag(result.diagnostic)
        return False

    def diag(self, message: str) -> None:
        for line in message.rstrip("\n").splitlines() or [""]:
            self.diag_stream.write(f"# {line}".rstrip() + "\n")

    def finalize(self) -> TapSummary:
        """Close the run, writing the trailing plan and mismatch diagnostics."""
        if not self._finalized:
            self._finalized = True
            if self.planned is None and self.count:
                self._write(f"1..{self.count}")
            if self.planned is not None and self.planned != self.count:
                self.diag(f"Looks like you planned {self.planned} tests but ran {self.count}.")
            if self.failed:
                self.diag(f"Looks like you failed {self.failed} test(s) of {self.count}.")
        return self.summary()

    def summary(self) -> TapSummary:
        return TapSummary(
            planned=self.planned,
            run=self.count,
            passed=self.passed,
            failed=self.failed,
            skipped=self.skipped,
        )

    @property
    def is_passing(self) -> bool:
        return self.summary().ok

    def _write(self, line: str) -> None:
        self.stream.write(line + "\n")
        self.stream.flush()


__all__ = ["PlanError", "TapReporter", "TapSummary"]
