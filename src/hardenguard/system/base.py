"""Shared plumbing for host collaborators."""

from __future__ import annotations

from pathlib import Path

from hardenguard.system.commands import Runner, run_cmd


class HostAccess:
    """Resolves host paths under a filesystem root and runs host commands.

    Paths in rules are always written as absolute host paths
    (``/etc/audit/rules.d/audit.rules``); with a non-default ``root`` they are
    resolved beneath it, so a mounted image or a test directory can be
    inspected the same way as the live system.
    """

    def __init__(self, root: str | Path = "/", runner: Runner | None = None) -> None:
        self.root = Path(root)
        self.runner: Runner = runner or run_cmd

    def resolve(self, path: str) -> Path:
        return self.root / path.lstrip("/")

    def host_path(self, resolved: Path) -> str:
        """Map a resolved path back to the host path shown to operators."""
        try:
            return "/" + str(resolved.relative_to(self.root)).lstrip("/")
        except ValueError:
            return str(resolved)
