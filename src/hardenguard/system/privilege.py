"""Privilege detection."""

from __future__ import annotations

import os


class PrivilegeChecker:
    """Reports whether the current process runs with root rights."""

    def is_privileged(self) -> bool:
        return os.geteuid() == 0
