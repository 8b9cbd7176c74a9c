"""Syntax, use strict, use warnings and coverage checks for Perl code bases."""

from .checks import StrictChecker
from .classifier import classify, is_perl_module, is_perl_script, module_to_path
from .config import ConfigError, StrictConfig, load_config
from .locator import all_files, all_perl_files
from .models import CheckResult, FileKind, Outcome, ScanResult
from .reporting import PlanError, TapReporter, TapSummary
from .scanner import STRICT_PATTERN, WARNINGS_PATTERN, scan_for_pragma

__all__ = [
    "CheckResult",
    "ConfigError",
    "FileKind",
    "Outcome",
    "PlanError",
    "STRICT_PATTERN",
    "ScanResult",
    "StrictChecker",
    "StrictConfig",
    "TapReporter",
    "TapSummary",
    "WARNINGS_PATTERN",
    "all_files",
    "all_perl_files",
    "classify",
    "is_perl_module",
    "is_perl_script",
    "load_config",
    "module_to_path",
    "scan_for_pragma",
]
