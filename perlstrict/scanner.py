"""Line scanner that looks for ``use strict``/``use warnings`` in Perl source.

The scan is lexical: comment lines, POD blocks and anything after
``__END__``/``__DATA__`` are ignored, and the first remaining line matching the
pragma pattern wins. It is easily fooled (a pragma inside a heredoc or string
still counts, ``=back`` inside an ``=over`` list ends the POD block early).
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Pattern

from .classifier import PERL_SHEBANG
from .models import ScanResult

STRICT_PATTERN = re.compile(r"\buse\s+strict\s*;")
WARNINGS_PATTERN = re.compile(r"\buse\s+warnings(\s|::|;)")

COMMENT_PATTERN = re.compile(r"^\s*#")
DOC_OPEN_PATTERN = re.compile(r"^\s*=\w+")
DOC_CLOSE_PATTERN = re.compile(r"^\s*=(cut|back|end)")
END_OF_CODE_PATTERN = re.compile(r"^\s*(__END__|__DATA__)")
WARNINGS_FLAG_PATTERN = re.compile(r"perl\s+-\w*[wW]")


class ScanState(Enum):
    """Where the scanner currently is in the file."""

    CODE = "code"
    IN_DOC = "in_doc"


def shebang_enables_warnings(line: str) -> bool:
    """Return True for ``#!/usr/bin/perl -w`` style first lines."""
    return bool(PERL_SHEBANG.match(line)) and bool(WARNINGS_FLAG_PATTERN.search(line))


def scan_for_pragma(
    path: str,
    pattern: Pattern[str],
    *,
    check_shebang_flag: bool = False,
    scan_body: bool = True,
) -> ScanResult:
    """Scan *path* line by line for *pattern* outside comments and POD.

    With ``check_shebang_flag`` a first line such as ``#!perl -w`` counts as a
    match before any body line is looked at. ``scan_body=False`` limits the
    scan to that shebang check.
    """
    try:
        handle = open(path, encoding="utf-8", errors="replace")
    except OSError as exc:
        return ScanResult(found=False, error=f"Could not open {path}: {exc.strerror or exc}")

    state = ScanState.CODE
    scanned = 0
    with handle:
        for line_number, line in enumerate(handle, start=1):
            if line_number == 1 and check_shebang_flag and shebang_enables_warnings(line):
                return ScanResult(found=True, line_number=1, lines_scanned=0)
            if not scan_body:
                break
            if COMMENT_PATTERN.match(line):
                continue
            if state is ScanState.CODE and DOC_OPEN_PATTERN.match(line):
                state = ScanState.IN_DOC
            if state is ScanState.IN_DOC:
                if DOC_CLOSE_PATTERN.match(line):
                    state = ScanState.CODE
                continue
            if END_OF_CODE_PATTERN.match(line):
                break
            scanned += 1
            if pattern.search(line):
                return ScanResult(found=True, line_number=line_number, lines_scanned=scanned)
    return ScanResult(found=False, lines_scanned=scanned)


def has_strict(path: str) -> ScanResult:
    return scan_for_pragma(path, STRICT_PATTERN)


def has_warnings(path: str, *, is_script: bool = False, can_use_warnings: bool = True) -> ScanResult:
    """Look for ``use warnings`` and, for scripts, a ``-w`` shebang flag."""
    return scan_for_pragma(
        path,
        WARNINGS_PATTERN,
        check_shebang_flag=is_script,
        scan_body=can_use_warnings,
    )


__all__ = [
    "STRICT_PATTERN",
    "ScanState",
    "WARNINGS_PATTERN",
    "has_strict",
    "has_warnings",
    "scan_for_pragma",
    "shebang_enables_warnings",
]
