"""Subprocess plumbing for the perl and cover binaries."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .logging import get_logger

logger = get_logger("process")


@dataclass
class CommandResult:
    """Exit status and captured text of one external command."""

    args: Sequence[str]
    returncode: Optional[int]
    output: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0


Runner = Callable[..., CommandResult]


def run_command(
    args: Sequence[str],
    *,
    merge_stderr: bool = False,
    discard_stdout: bool = False,
    discard_stderr: bool = False,
) -> CommandResult:
    """Run *args* to completion and capture its output.

    ``merge_stderr`` folds stderr into the captured text. ``discard_stdout``
    captures only stderr; ``discard_stderr`` captures only stdout. A binary
    that cannot be started is reported through ``error`` rather than raised.
    """
    stdout = subprocess.DEVNULL if discard_stdout else subprocess.PIPE
    if merge_stderr and not discard_stdout:
        stderr = subprocess.STDOUT
    elif discard_stderr:
        stderr = subprocess.DEVNULL
    else:
        stderr = subprocess.PIPE

    logger.debug("Running %s", " ".join(args))
    try:
        completed = subprocess.run(
            list(args),
            stdout=stdout,
            stderr=stderr,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as exc:
        logger.debug("Failed to start %s: %s", args[0], exc)
        return CommandResult(args=args, returncode=None, error=f"Unable to run '{args[0]}': {exc}")

    if discard_stdout:
        output = completed.stderr or ""
    else:
        output = completed.stdout or ""
        if not merge_stderr and not discard_stderr and completed.stderr:
            output += completed.stderr
    logger.debug("%s exited with status %s", args[0], completed.returncode)
    return CommandResult(args=args, returncode=completed.returncode, output=output)


__all__ = ["CommandResult", "Runner", "run_command"]
