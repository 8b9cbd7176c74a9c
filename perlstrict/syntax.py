"""Syntax checks through ``perl -c``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .process import Runner, run_command

SYNTAX_OK_FMT = "{path} syntax OK"


@dataclass
class SyntaxResult:
    """Outcome of one ``perl -c`` run."""

    ok: bool
    output: str

    @property
    def diagnostic(self) -> Optional[str]:
        return None if self.ok else self.output


class SyntaxChecker:
    """Runs the external interpreter in compile-only mode."""

    def __init__(
        self,
        perl: str = "perl",
        include_dirs: Sequence[str] = (),
        *,
        runner: Runner | None = None,
    ) -> None:
        self.perl = perl
        self.include_dirs = list(include_dirs)
        self._runner = runner or run_command

    def command(self, path: str) -> List[str]:
        args = [self.perl]
        for directory in self.include_dirs:
            args.extend(["-I", directory])
        args.extend(["-c", path])
        return args

    def check(self, path: str) -> SyntaxResult:
        """Return whether perl reports ``<path> syntax OK`` for *path*."""
        result = self._runner(self.command(path), merge_stderr=True)
        if result.error is not None:
            return SyntaxResult(ok=False, output=result.error)
        ok = SYNTAX_OK_FMT.format(path=path) in result.output
        return SyntaxResult(ok=ok, output=result.output)


__all__ = ["SYNTAX_OK_FMT", "SyntaxChecker", "SyntaxResult"]
