"""Exception hierarchy for HardenGuard."""

from __future__ import annotations


class HardenGuardError(Exception):
    """Base class for all HardenGuard errors."""


class MissingTargetError(HardenGuardError):
    """A file or directory required by a remediation step does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Target not found: {path}")
        self.path = path


class PermissionDeniedError(HardenGuardError):
    """The current context lacks the rights to perform an operation."""


class RemediationStepError(HardenGuardError):
    """A single remediation sub-step failed."""


class ReloadError(RemediationStepError):
    """A dependent service failed to reload or restart."""


class RuleDefinitionError(HardenGuardError):
    """A rule catalog entry is malformed."""
