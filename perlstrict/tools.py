"""Memoised lookups of external tools for one checker."""

from __future__ import annotations

import re
import shutil
from typing import Optional

from .logging import get_logger
from .process import Runner, run_command

logger = get_logger("tools")

COVER_BINARY = "cover"
# ``use warnings`` arrived in perl 5.6.
WARNINGS_MIN_VERSION = 5.006

_VERSION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)")


class ToolCache:
    """Holds the cover path and perl version once they have been looked up.

    Each value is resolved at most once and never invalidated.
    """

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner = runner or run_command
        self._cover: Optional[str] = None
        self._perl_versions: dict[str, Optional[float]] = {}

    def cover_path(self, override: str | None = None) -> Optional[str]:
        """Return the cover binary, preferring *override* over a ``PATH`` search."""
        if self._cover is not None:
            return self._cover
        if override:
            self._cover = override
        else:
            self._cover = shutil.which(COVER_BINARY)
            logger.debug("cover binary resolved to %s", self._cover)
        return self._cover

    def perl_version(self, perl: str) -> Optional[float]:
        """Return ``$]`` for *perl*, or None when it cannot be asked."""
        if perl in self._perl_versions:
            return self._perl_versions[perl]
        result = self._runner([perl, "-e", "print $]"], discard_stderr=True)
        version: Optional[float] = None
        if result.ok:
            match = _VERSION_PATTERN.match(result.output)
            if match:
                version = float(match.group(1))
        logger.debug("perl %s reports version %s", perl, version)
        self._perl_versions[perl] = version
        return version

    def can_use_warnings(self, perl: str) -> bool:
        version = self.perl_version(perl)
        # An interpreter we cannot probe is assumed to be modern.
        return version is None or version >= WARNINGS_MIN_VERSION


__all__ = ["COVER_BINARY", "ToolCache", "WARNINGS_MIN_VERSION"]
