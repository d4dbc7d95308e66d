"""Read-only queries against the host."""

from __future__ import annotations

import glob
import grp
import logging
import os
import pwd
import stat
from pathlib import Path

from hardenguard.errors import PermissionDeniedError
from hardenguard.match import LineMatcher
from hardenguard.models import Finding
from hardenguard.system.base import HostAccess

logger = logging.getLogger(__name__)

DEFAULT_UID_MIN = 1000


class SystemInspector(HostAccess):
    """Answers questions about the host without changing it."""

    def read_lines(self, path: str) -> list[str] | None:
        """Return the lines of ``path`` or None if it does not exist."""
        try:
            with open(self.resolve(path), encoding="utf-8", errors="replace") as f:
                return f.read().splitlines()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied reading {path}") from e

    def exists(self, path: str) -> bool:
        try:
            return self.resolve(path).exists()
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied checking {path}") from e

    def expand(self, patterns: list[str]) -> list[str]:
        """Expand host path globs.

        Literal paths are returned whether or not they exist so that reports
        can say a file is missing; globs only yield existing files.
        """
        paths: list[str] = []
        for pattern in patterns:
            if glob.has_magic(pattern):
                found = sorted(glob.glob(str(self.resolve(pattern))))
                paths.extend(self.host_path(Path(p)) for p in found
                             if os.path.isfile(p))
            else:
                paths.append(pattern)
        # keep order, drop duplicates
        return list(dict.fromkeys(paths))

    def find_lines(self, patterns: list[str], matcher: LineMatcher) -> list[Finding]:
        """Search every file in ``patterns`` for lines matching ``matcher``."""
        findings: list[Finding] = []
        for path in self.expand(patterns):
            lines = self.read_lines(path)
            if lines is None:
                continue
            for number, text in matcher.search(lines):
                findings.append(Finding(location=path, line_number=number,
                                        matched_text=text.strip()))
        return findings

    def file_mode(self, path: str) -> int | None:
        try:
            return stat.S_IMODE(os.stat(self.resolve(path)).st_mode)
        except FileNotFoundError:
            return None
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied reading mode of {path}") from e

    def file_owner(self, path: str) -> tuple[str, str] | None:
        try:
            st = os.stat(self.resolve(path))
        except FileNotFoundError:
            return None
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied reading owner of {path}") from e
        try:
            user = pwd.getpwuid(st.st_uid).pw_name
        except KeyError:
            user = str(st.st_uid)
        try:
            group = grp.getgrgid(st.st_gid).gr_name
        except KeyError:
            group = str(st.st_gid)
        return user, group

    def package_installed(self, name: str) -> bool:
        return self.runner(["rpm", "-q", name]).ok

    def selinux_mode(self) -> str | None:
        """Current runtime SELinux mode (Enforcing/Permissive/Disabled)."""
        result = self.runner(["getenforce"])
        if not result.ok or not result.stdout:
            logger.debug("getenforce unavailable: %s", result.output)
            return None
        return result.stdout.strip()

    def service_state(self, name: str) -> tuple[str, str]:
        """Return (is-enabled, is-active) answers from systemd."""
        enabled = self.runner(["systemctl", "is-enabled", name])
        active = self.runner(["systemctl", "is-active", name])
        return (enabled.stdout.strip() or "unknown", active.stdout.strip() or "unknown")

    def loaded_modules(self) -> set[str]:
        lines = self.read_lines("/proc/modules") or []
        return {line.split()[0] for line in lines if line.strip()}

    def sysctl_value(self, key: str) -> str | None:
        path = "/proc/sys/" + key.replace(".", "/")
        lines = self.read_lines(path)
        if not lines:
            return None
        return " ".join(lines[0].split())

    def login_defs_value(self, key: str) -> str | None:
        """Last active value of ``key`` in /etc/login.defs."""
        value = None
        for line in self.read_lines("/etc/login.defs") or []:
            parts = line.split()
            if len(parts) >= 2 and parts[0] == key:
                value = parts[1]
        return value

    def uid_min(self) -> int:
        value = self.login_defs_value("UID_MIN")
        try:
            return int(value) if value is not None else DEFAULT_UID_MIN
        except ValueError:
            return DEFAULT_UID_MIN
