"""Core data models shared across perlstrict components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class FileKind(Enum):
    """Classification of a Perl source file."""

    MODULE = "module"
    SCRIPT = "script"
    BOTH = "both"
    NEITHER = "neither"

    @classmethod
    def from_flags(cls, is_module: bool, is_script: bool) -> "FileKind":
        if is_module and is_script:
            return cls.BOTH
        if is_module:
            return cls.MODULE
        if is_script:
            return cls.SCRIPT
        return cls.NEITHER

    @property
    def is_perl(self) -> bool:
        return self is not FileKind.NEITHER


class Outcome(Enum):
    """Tri-state result of a single check."""

    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


@dataclass
class CheckResult:
    """Outcome of one check, emitted to the reporter as soon as it is known."""

    outcome: Outcome
    label: str
    diagnostic: Optional[str] = None

    @classmethod
    def passed(cls, label: str) -> "CheckResult":
        return cls(Outcome.PASS, label)

    @classmethod
    def failed(cls, label: str, diagnostic: Optional[str] = None) -> "CheckResult":
        return cls(Outcome.FAIL, label, diagnostic)

    @classmethod
    def skipped(cls, label: str, diagnostic: Optional[str] = None) -> "CheckResult":
        return cls(Outcome.SKIP, label, diagnostic)

    @property
    def ok(self) -> bool:
        return self.outcome is not Outcome.FAIL


@dataclass
class ScanResult:
    """Result of scanning one file for a pragma."""

    found: bool
    line_number: Optional[int] = None
    lines_scanned: int = 0
    error: Optional[str] = None


@dataclass
class FileCoverage:
    """Exit status of one file run under coverage instrumentation."""

    path: str
    returncode: Optional[int]
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class CoverageRun:
    """State of one coverage sweep."""

    threshold: float
    targets: List[str] = field(default_factory=list)
    files: List[FileCoverage] = field(default_factory=list)
    report: str = ""
    total: Optional[float] = None

    @property
    def passed(self) -> bool:
        return self.total is not None and self.total >= self.threshold
