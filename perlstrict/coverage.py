"""Devel::Cover driven coverage sweep with a threshold gate."""

from __future__ import annotations

import os
import re
from typing import Callable, Iterable, List, Optional, Sequence

from .classifier import is_perl_script
from .locator import all_files
from .logging import get_logger
from .models import CheckResult, CoverageRun, FileCoverage
from .process import Runner, run_command

logger = get_logger("coverage")

COVER_MODULE = "Devel::Cover"
TOTAL_PATTERN = re.compile(r"^\s*Total.+?([\d.]+)\s*$", re.MULTILINE)

Emit = Callable[[CheckResult], None]


def _total_text(report: str) -> Optional[str]:
    match = TOTAL_PATTERN.search(report)
    return match.group(1) if match else None


def parse_total(report: str) -> Optional[float]:
    """Return the percentage on the ``Total`` row of a cover report."""
    text = _total_text(report)
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def coverage_targets(
    dirs: Sequence[str],
    *,
    script_path: str | None = None,
    exclude: Callable[[str], bool] | None = None,
) -> List[str]:
    """Return the scripts under *dirs*, minus the running script itself."""
    own = os.path.realpath(script_path) if script_path else None
    targets: List[str] = []
    for path in all_files(dirs, script_path=script_path):
        if not is_perl_script(path):
            continue
        if own is not None and os.path.realpath(path) == own:
            continue
        if exclude is not None and exclude(path):
            continue
        targets.append(path)
    return targets


def format_percent(value: float) -> str:
    """Render *value* without trailing zeros, falling back to repr when that would round it."""
    short = f"{value:g}"
    return short if float(short) == value else repr(value)


class CoverageAggregator:
    """Runs each target under Devel::Cover and gates on the reported total.

    Every step reports through ``emit`` as soon as its outcome is known. Only a
    failed ``cover -delete`` ends the sweep early.
    """

    def __init__(
        self,
        perl: str,
        cover: str | None,
        *,
        emit: Emit,
        runner: Runner | None = None,
    ) -> None:
        self.perl = perl
        self.cover = cover
        self._emit = emit
        self._runner = runner or run_command

    def run(self, threshold: float, targets: Iterable[str]) -> CoverageRun:
        coverage = CoverageRun(threshold=threshold, targets=list(targets))

        if not self.cover:
            self._emit(CheckResult.skipped("Coverage", "Cover binary not found"))
            return coverage

        reset = self._runner([self.cover, "-delete"], merge_stderr=True)
        if not reset.ok:
            detail = reset.error or reset.output.strip() or f"exit status {reset.returncode}"
            self._emit(
                CheckResult.failed(
                    f"Reset coverage database with {self.cover} -delete",
                    f"Cover binary {self.cover} is not usable: {detail}",
                )
            )
            return coverage

        for path in coverage.targets:
            coverage.files.append(self._instrument(path))

        report = self._runner([self.cover], discard_stderr=True)
        coverage.report = report.output if report.error is None else ""
        if coverage.report.strip():
            self._emit(CheckResult.passed("Got cover"))
        else:
            self._emit(CheckResult.failed("Got cover", report.error or "cover produced no report"))

        coverage.total = parse_total(coverage.report)
        logger.debug("cover total %s over %d file(s)", coverage.total, len(coverage.files))
        if coverage.total is None:
            self._emit(
                CheckResult.failed(
                    f"coverage >= {format_percent(threshold)}%",
                    "Could not find a Total line in the cover report",
                )
            )
            return coverage

        total = _total_text(coverage.report)
        label = f"coverage = {total}% >= {format_percent(threshold)}%"
        if coverage.passed:
            self._emit(CheckResult.passed(label))
        else:
            self._emit(
                CheckResult.failed(
                    label,
                    f"Total coverage {total}% is below "
                    f"the {format_percent(threshold)}% threshold",
                )
            )
        return coverage

    def _instrument(self, path: str) -> FileCoverage:
        result = self._runner([self.perl, f"-M{COVER_MODULE}", path], discard_stdout=True)
        label = f"Coverage captured from {path}"
        if result.ok:
            self._emit(CheckResult.passed(label))
        else:
            detail = result.error or result.output.strip() or f"exit status {result.returncode}"
            self._emit(CheckResult.failed(label, detail))
        return FileCoverage(path=path, returncode=result.returncode, output=result.error or result.output)


__all__ = [
    "COVER_MODULE",
    "CoverageAggregator",
    "coverage_targets",
    "format_percent",
    "parse_total",
]
