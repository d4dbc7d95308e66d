"""State-changing operations against the host.

Every method either completes or raises a ``HardenGuardError`` subclass;
callers turn those into per-step results.
"""

from __future__ import annotations

import logging
import os
import shutil
from typing import Sequence

from hardenguard.errors import (
    MissingTargetError,
    PermissionDeniedError,
    ReloadError,
    RemediationStepError,
)
from hardenguard.match import LineMatcher
from hardenguard.system.base import HostAccess

logger = logging.getLogger(__name__)

PACKAGE_MANAGER = "dnf"


class SystemMutator(HostAccess):
    """Applies remediation actions to the host."""

    def _read(self, path: str) -> list[str]:
        target = self.resolve(path)
        if not target.exists():
            return []
        try:
            with open(target, encoding="utf-8", errors="replace") as f:
                return f.read().splitlines()
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied reading {path}") from e

    def _write(self, path: str, lines: list[str]) -> None:
        target = self.resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8") as f:
                f.write("\n".join(lines) + ("\n" if lines else ""))
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied writing {path}") from e
        except OSError as e:
            raise RemediationStepError(f"Unable to write {path}: {e}") from e

    def ensure_file(self, path: str) -> bool:
        """Create ``path`` and its parent directory if absent."""
        target = self.resolve(path)
        if target.exists():
            return False
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.touch()
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied creating {path}") from e
        except OSError as e:
            raise RemediationStepError(f"Unable to create {path}: {e}") from e
        logger.info("Created %s", path)
        return True

    def append_line(self, path: str, line: str) -> bool:
        """Append ``line`` unless an identical active line is already present.

        Returns True if the file changed.
        """
        self.ensure_file(path)
        matcher = LineMatcher.exact(line)
        existing = self._read(path)
        if matcher.search(existing):
            logger.debug("Line already present in %s: %s", path, line)
            return False

        target = self.resolve(path)
        try:
            needs_newline = target.stat().st_size > 0 and not target.read_bytes().endswith(b"\n")
            with open(target, "a", encoding="utf-8") as f:
                if needs_newline:
                    f.write("\n")
                f.write(line + "\n")
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied writing {path}") from e
        except OSError as e:
            raise RemediationStepError(f"Unable to append to {path}: {e}") from e
        logger.info("Appended to %s: %s", path, line)
        return True

    def remove_lines(self, path: str, matcher: LineMatcher) -> int:
        """Drop active lines matching ``matcher``; returns how many went."""
        lines = self._read(path)
        kept = [line for line in lines if not matcher.matches(line)]
        removed = len(lines) - len(kept)
        if removed:
            self._write(path, kept)
            logger.info("Removed %d line(s) from %s", removed, path)
        return removed

    def set_key_value(self, path: str, key_matcher: LineMatcher, line: str) -> bool:
        """Replace active lines matching ``key_matcher`` with ``line``, else append.

        Commented lines are left alone. Only the first active match is
        rewritten; later duplicates are dropped so the file ends up with a
        single effective setting.
        """
        self.ensure_file(path)
        lines = self._read(path)
        result: list[str] = []
        replaced = False
        for existing in lines:
            if key_matcher.matches(existing):
                if not replaced:
                    result.append(line)
                    replaced = True
                continue
            result.append(existing)
        if not replaced:
            result.append(line)
        if result == lines:
            return False
        self._write(path, result)
        logger.info("Set in %s: %s", path, line)
        return True

    def set_mode(self, path: str, mode: int) -> None:
        target = self.resolve(path)
        if not target.exists():
            raise MissingTargetError(path)
        try:
            os.chmod(target, mode)
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied changing mode of {path}") from e
        logger.info("chmod %o %s", mode, path)

    def set_owner(self, path: str, user: str, group: str) -> None:
        target = self.resolve(path)
        if not target.exists():
            raise MissingTargetError(path)
        try:
            shutil.chown(target, user=user, group=group)
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied changing owner of {path}") from e
        except (LookupError, OSError) as e:
            raise RemediationStepError(f"Unable to chown {path}: {e}") from e
        logger.info("chown %s:%s %s", user, group, path)

    def _command(self, argv: Sequence[str], error: type[RemediationStepError] = RemediationStepError) -> None:
        result = self.runner(argv)
        if not result.ok:
            raise error(f"'{' '.join(argv)}' failed ({result.returncode}): {result.output}")

    def install_package(self, name: str) -> None:
        self._command([PACKAGE_MANAGER, "install", "-y", name])

    def remove_package(self, name: str) -> None:
        self._command([PACKAGE_MANAGER, "remove", "-y", name])

    def enable_service(self, name: str) -> None:
        self._command(["systemctl", "--now", "enable", name])

    def reload_service(self, name: str, action: str = "reload") -> None:
        self._command(["systemctl", action, name], ReloadError)

    def run_reload_command(self, argv: Sequence[str]) -> None:
        self._command(argv, ReloadError)

    def set_selinux_runtime(self, mode: str) -> None:
        self._command(["setenforce", "1" if mode.lower() == "enforcing" else "0"])

    def set_sysctl(self, key: str, value: str) -> None:
        self._command(["sysctl", "-w", f"{key}={value}"])

    def unload_module(self, name: str) -> None:
        self._command(["modprobe", "-r", name])
