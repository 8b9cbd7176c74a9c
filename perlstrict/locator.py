"""Directory walking for Perl source discovery."""

from __future__ import annotations

import os
import sys
from typing import Iterator, List, Sequence

from .classifier import classify
from .logging import get_logger

logger = get_logger("locator")

_VCS_DIRS = {
    "CVS",
    ".git",
    ".svn",
    ".hg",
    ".bzr",
}


def script_dir(script_path: str | None = None) -> str:
    """Return the directory holding the running script."""
    path = script_path if script_path is not None else sys.argv[0]
    return os.path.dirname(os.path.abspath(path)) if path else os.getcwd()


def default_base_dir(script_path: str | None = None) -> str:
    """Return the directory one level above the running script."""
    return os.path.normpath(os.path.join(script_dir(script_path), os.pardir))


def all_files(base_dirs: Sequence[str] = (), *, script_path: str | None = None) -> List[str]:
    """Return readable regular files below *base_dirs*, skipping VCS directories."""
    roots = list(base_dirs) or [default_base_dir(script_path)]
    found: List[str] = []
    for root in roots:
        found.extend(_iter_files(root))
    return found


def all_perl_files(base_dirs: Sequence[str] = (), *, script_path: str | None = None) -> List[str]:
    """Return the files from :func:`all_files` that look like Perl modules or scripts."""
    return [
        path
        for path in all_files(base_dirs, script_path=script_path)
        if classify(path).is_perl
    ]


def _iter_files(root: str) -> Iterator[str]:
    if os.path.isfile(root):
        if os.access(root, os.R_OK):
            yield os.path.normpath(root)
        return

    def _on_error(exc: OSError) -> None:
        logger.debug("Skipping unreadable path %s: %s", exc.filename, exc.strerror)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames[:] = sorted(name for name in dirnames if name not in _VCS_DIRS)
        for filename in sorted(filenames):
            path = os.path.join(dirpath, filename)
            if not os.path.isfile(path) or not os.access(path, os.R_OK):
                continue
            yield os.path.normpath(path)


__all__ = ["all_files", "all_perl_files", "default_base_dir", "script_dir"]
