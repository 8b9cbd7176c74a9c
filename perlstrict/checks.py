"""Public checking entry points.

A :class:`StrictChecker` carries everything one checking session needs (the
configuration, the TAP reporter and the tool cache), so two checkers never
share plan counters or memoised tool paths::

    checker = StrictChecker()
    checker.syntax_ok("bin/myscript.pl")
    checker.strict_ok("My::Module", "use strict; in My::Module")
    checker.all_perl_files_ok("lib", "bin")
    checker.all_cover_ok(80, "t")
    checker.finish()
"""

from __future__ import annotations

import os
import sys
from fnmatch import fnmatchcase
from pathlib import Path
from typing import List, Optional

from .classifier import classify, library_search_roots, module_to_path
from .config import ConfigError, StrictConfig, check_threshold
from .coverage import CoverageAggregator, coverage_targets
from .locator import all_perl_files, script_dir
from .logging import get_logger
from .models import CheckResult, CoverageRun, FileKind
from .process import Runner, run_command
from .reporting import TapReporter, TapSummary
from .scanner import has_strict, has_warnings
from .syntax import SyntaxChecker
from .tools import ToolCache

logger = get_logger("checks")


class StrictChecker:
    """Runs syntax, strict, warnings and coverage checks and reports them as TAP."""

    def __init__(
        self,
        config: StrictConfig | None = None,
        *,
        reporter: TapReporter | None = None,
        runner: Runner | None = None,
        script_path: str | None = None,
    ) -> None:
        self.config = config or StrictConfig(root=Path.cwd())
        self.reporter = reporter or TapReporter()
        self.script_path = script_path if script_path is not None else sys.argv[0]
        self._runner = runner or run_command
        self.tools = ToolCache(runner=self._runner)
        self.last_coverage: Optional[CoverageRun] = None

    @property
    def search_roots(self) -> List[str]:
        include = [self._from_root(directory) for directory in self.config.include_dirs]
        return library_search_roots(include)

    def syntax_ok(self, file: str, label: str | None = None) -> bool:
        """Check that ``perl -c`` accepts *file* (a path or a ``My::Module`` name)."""
        text = label or f"Syntax check {file}"
        path = module_to_path(file, self.search_roots)
        if not (os.path.isfile(path) and os.access(path, os.R_OK)):
            return self._emit(CheckResult.failed(text, f"File {path} not found or not readable"))
        if not classify(path).is_perl:
            return self._emit(CheckResult.failed(text, f"{path} is not a perl module or a perl script"))

        checker = SyntaxChecker(self.config.perl, self.search_roots, runner=self._runner)
        result = checker.check(path)
        if result.ok:
            return self._emit(CheckResult.passed(text))
        return self._emit(CheckResult.failed(text, result.diagnostic))

    def strict_ok(self, file: str, label: str | None = None) -> bool:
        """Check that *file* says ``use strict;`` before its code ends."""
        text = label or f"use strict   {file}"
        path = module_to_path(file, self.search_roots)
        scan = has_strict(path)
        if scan.error is not None:
            return self._emit(CheckResult.failed(text, scan.error))
        if scan.found:
            return self._emit(CheckResult.passed(text))
        return self._emit(CheckResult.failed(text, f"No 'use strict;' found in {path}"))

    def warnings_ok(self, file: str, label: str | None = None) -> Optional[bool]:
        """Check that *file* enables warnings.

        Scripts pass on a ``#!...perl -w`` first line. Otherwise a ``use
        warnings`` statement is required, unless the target perl predates it,
        in which case a module-only file is skipped and None is returned.
        """
        text = label or f"use warnings {file}"
        path = module_to_path(file, self.search_roots)
        kind = classify(path)
        is_module = kind in (FileKind.MODULE, FileKind.BOTH)
        is_script = kind in (FileKind.SCRIPT, FileKind.BOTH)
        capable = self._can_use_warnings()

        if is_module and not is_script and not capable:
            self._emit(CheckResult.skipped(
                text,
                "This version of perl does not have use warnings - perl 5.6 or higher is required",
            ))
            return None

        scan = has_warnings(path, is_script=is_script, can_use_warnings=capable)
        if scan.error is not None:
            return self._emit(CheckResult.failed(text, scan.error))
        if scan.found:
            return self._emit(CheckResult.passed(text))
        return self._emit(CheckResult.failed(text, f"No 'use warnings' found in {path}"))

    def all_perl_files_ok(self, *dirs: str) -> bool:
        """Run the enabled per-file checks on every Perl file below *dirs*.

        Without *dirs* the walk starts one level above the running script.
        Syntax always runs before strict, and strict before warnings, for each file.
        """
        files = [
            path
            for path in all_perl_files(dirs, script_path=self.script_path)
            if not self.is_excluded(path)
        ]
        logger.debug("Checking %d perl file(s)", len(files))
        self.reporter.ensure_plan()

        ok = True
        for path in files:
            if self.config.test_syntax:
                ok = self.syntax_ok(path) and ok
            if self.config.test_strict:
                ok = self.strict_ok(path) and ok
            if self.config.test_warnings:
                ok = self.warnings_ok(path) is not False and ok
        return ok

    def all_cover_ok(self, threshold: float | None = None, *dirs: str) -> Optional[float]:
        """Run test scripts under Devel::Cover and require *threshold* percent coverage.

        Without *dirs* the scripts next to the running script are used. Returns
        the total coverage, or None when it could not be measured. A threshold
        outside 0..100 is reported as a failed result without running anything.
        """
        limit = self.config.coverage.threshold
        if threshold is not None:
            try:
                limit = check_threshold(float(threshold))
            except (ConfigError, TypeError, ValueError) as exc:
                self._emit(CheckResult.failed(f"coverage >= {threshold}%", str(exc)))
                self.last_coverage = None
                return None
        search = list(dirs) or [script_dir(self.script_path) if self.script_path else "."]
        targets = coverage_targets(
            search,
            script_path=self.script_path or None,
            exclude=self.is_excluded,
        )
        self.reporter.ensure_plan()

        aggregator = CoverageAggregator(
            self.config.perl,
            self.tools.cover_path(self.config.coverage.cover),
            emit=self._emit,
            runner=self._runner,
        )
        self.last_coverage = aggregator.run(limit, targets)
        return self.last_coverage.total

    def finish(self) -> TapSummary:
        return self.reporter.finalize()

    def is_excluded(self, path: str) -> bool:
        normalised = os.path.normpath(path)
        for pattern in self.config.exclude:
            candidate = os.path.normpath(pattern)
            if normalised == candidate or fnmatchcase(normalised, pattern):
                return True
            if fnmatchcase(os.path.relpath(os.path.abspath(path), self.config.root), pattern):
                return True
        return False

    def _can_use_warnings(self) -> bool:
        if self.config.can_use_warnings is not None:
            return self.config.can_use_warnings
        return self.tools.can_use_warnings(self.config.perl)

    def _from_root(self, directory: str) -> str:
        if os.path.isabs(directory):
            return directory
        return os.path.join(str(self.config.root), directory)

    def _emit(self, result: CheckResult) -> bool:
        self.reporter.ensure_plan()
        return self.reporter.record(result)


__all__ = ["StrictChecker"]
