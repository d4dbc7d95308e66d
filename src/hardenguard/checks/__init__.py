"""Check types that rules are composed of."""

from __future__ import annotations

from typing import Any

from hardenguard.checks.base import Check
from hardenguard.checks.files import FileModeCheck, FileOwnerCheck, LinePresentCheck, SettingCheck
from hardenguard.checks.kernel import KernelModuleCheck, SysctlCheck
from hardenguard.checks.packages import PackageCheck
from hardenguard.checks.services import SelinuxModeCheck, ServiceCheck
from hardenguard.errors import RuleDefinitionError

CHECK_TYPES: dict[str, type[Check]] = {
    cls.check_type: cls
    for cls in (
        LinePresentCheck,
        SettingCheck,
        FileModeCheck,
        FileOwnerCheck,
        PackageCheck,
        ServiceCheck,
        SelinuxModeCheck,
        KernelModuleCheck,
        SysctlCheck,
    )
}


def build_check(data: dict[str, Any]) -> Check:
    """Create a check from its rule-catalog mapping."""
    if not isinstance(data, dict):
        raise RuleDefinitionError(f"Check must be a mapping, got {type(data).__name__}")
    check_type = data.get("type")
    cls = CHECK_TYPES.get(check_type)
    if cls is None:
        raise RuleDefinitionError(f"Unknown check type: {check_type!r}")
    return cls.from_dict(data)


__all__ = [
    "CHECK_TYPES",
    "Check",
    "FileModeCheck",
    "FileOwnerCheck",
    "KernelModuleCheck",
    "LinePresentCheck",
    "PackageCheck",
    "SelinuxModeCheck",
    "ServiceCheck",
    "SettingCheck",
    "SysctlCheck",
    "build_check",
]
