"""Perl module/script classification and module name resolution."""

from __future__ import annotations

import os
import re
from typing import Iterable, List, Mapping

from .models import FileKind

PERL_SHEBANG = re.compile(r"^#!.*perl")
MODULE_SEPARATOR = "::"
MODULE_SUFFIX = ".pm"

_MODULE_SUFFIX_PATTERN = re.compile(r"\.pm$", re.IGNORECASE)
_SCRIPT_SUFFIX_PATTERN = re.compile(r"\.pl$", re.IGNORECASE)
_TEST_SUFFIX = ".t"
# Longest first line worth reading when looking for a shebang.
_FIRST_LINE_LIMIT = 4096


def is_perl_module(path: str) -> bool:
    """Return True for ``*.pm`` files and ``Foo::Bar`` style module names."""
    return bool(_MODULE_SUFFIX_PATTERN.search(path)) or MODULE_SEPARATOR in path


def is_perl_script(path: str) -> bool:
    """Return True for ``*.pl``/``*.t`` files or files starting with a perl shebang."""
    if _SCRIPT_SUFFIX_PATTERN.search(path) or path.endswith(_TEST_SUFFIX):
        return True
    first = read_first_line(path)
    return first is not None and bool(PERL_SHEBANG.match(first))


def classify(path: str) -> FileKind:
    return FileKind.from_flags(is_perl_module(path), is_perl_script(path))


def read_first_line(path: str) -> str | None:
    """Return the first line of *path*, or None when it is empty or unreadable."""
    try:
        with open(path, "rb") as handle:
            raw = handle.readline(_FIRST_LINE_LIMIT)
    except OSError:
        return None
    if not raw:
        return None
    return raw.decode("utf-8", errors="replace")


def library_search_roots(
    include_dirs: Iterable[str], environ: Mapping[str, str] | None = None
) -> List[str]:
    """Return include dirs followed by ``PERL5LIB`` entries, without duplicates."""
    env = os.environ if environ is None else environ
    roots: List[str] = []
    candidates = list(include_dirs)
    candidates.extend(env.get("PERL5LIB", "").split(os.pathsep))
    for entry in candidates:
        if entry and entry not in roots:
            roots.append(entry)
    return roots


def module_to_path(identifier: str, search_roots: Iterable[str]) -> str:
    """Resolve ``Foo::Bar`` to ``<root>/Foo/Bar.pm`` under the first matching root.

    Anything without ``::`` is taken to be a path already and returned as-is.
    When no root holds the module the identifier comes back unchanged; the
    caller reports the missing file when it tries to use it.
    """
    if MODULE_SEPARATOR not in identifier:
        return identifier
    parts = identifier.split(MODULE_SEPARATOR)
    relative = os.path.join(*parts) + MODULE_SUFFIX
    for root in search_roots:
        candidate = os.path.join(root, relative)
        if os.path.isfile(candidate) and os.access(candidate, os.R_OK):
            return candidate
    return identifier


__all__ = [
    "PERL_SHEBANG",
    "classify",
    "is_perl_module",
    "is_perl_script",
    "library_search_roots",
    "module_to_path",
    "read_first_line",
]
