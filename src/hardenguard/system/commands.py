"""Thin wrapper around external commands (rpm, systemctl, getenforce, ...)."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120


@dataclass
class CommandResult:
    """Return code and captured output of one command."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return self.stderr or self.stdout


Runner = Callable[[Sequence[str]], CommandResult]


def run_cmd(argv: Sequence[str], timeout: int = DEFAULT_TIMEOUT) -> CommandResult:
    """Run a command, capturing stdout/stderr.

    A missing executable is reported as return code 127 and a timeout as 124,
    the same codes a shell would use, so callers only ever look at the result.
    """
    argv = tuple(argv)
    logger.debug("Running: %s", " ".join(argv))
    try:
        p = subprocess.run(
            argv,
            text=True,
            capture_output=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError:
        return CommandResult(argv, 127, "", f"{argv[0]}: command not found")
    except subprocess.TimeoutExpired:
        return CommandResult(argv, 124, "", f"{argv[0]}: timed out after {timeout}s")

    return CommandResult(argv, p.returncode, (p.stdout or "").strip(), (p.stderr or "").strip())
