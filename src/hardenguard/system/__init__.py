"""Host collaborators — inspection, mutation, privilege and commands."""

from hardenguard.system.commands import CommandResult, run_cmd
from hardenguard.system.inspector import SystemInspector
from hardenguard.system.mutator import SystemMutator
from hardenguard.system.privilege import PrivilegeChecker

__all__ = [
    "CommandResult",
    "PrivilegeChecker",
    "SystemInspector",
    "SystemMutator",
    "run_cmd",
]
