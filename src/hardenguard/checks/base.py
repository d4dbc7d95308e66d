"""Base class and helpers shared by every check type."""

from __future__ import annotations

import abc
import logging
from typing import Any, Callable, ClassVar

from hardenguard.errors import HardenGuardError, RuleDefinitionError
from hardenguard.models import CheckOutcome, StepResult
from hardenguard.system.inspector import SystemInspector
from hardenguard.system.mutator import SystemMutator

logger = logging.getLogger(__name__)


class Check(abc.ABC):
    """One compliance predicate plus the steps that make it true."""

    check_type: ClassVar[str] = ""

    @classmethod
    @abc.abstractmethod
    def from_dict(cls, data: dict[str, Any]) -> Check:
        """Build the check from its rule-catalog entry."""

    @abc.abstractmethod
    def describe(self) -> str:
        """Short human-readable summary."""

    @abc.abstractmethod
    def inspect(self, inspector: SystemInspector) -> CheckOutcome:
        """Observe the host. Must not change anything."""

    @abc.abstractmethod
    def remediate(self, mutator: SystemMutator,
                  inspector: SystemInspector) -> list[StepResult]:
        """Attempt to bring the host into compliance, one step per action."""


def run_step(action: str, fn: Callable[[], Any], optional: bool = False) -> StepResult:
    """Run one mutator call and capture its outcome instead of raising."""
    try:
        changed = fn()
    except HardenGuardError as e:
        if optional:
            logger.info("Optional step '%s' did not complete: %s", action, e)
        else:
            logger.warning("Step '%s' failed: %s", action, e)
        return StepResult(action=action, success=False, detail=str(e), optional=optional)
    return StepResult(action=action, success=True, optional=optional,
                      changed=bool(changed) if changed is not None else True)


def require(data: dict[str, Any], key: str, check_type: str) -> Any:
    if key not in data or data[key] in (None, "", []):
        raise RuleDefinitionError(f"'{check_type}' check requires '{key}'")
    return data[key]


def as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def render(text: str, inspector: SystemInspector) -> str:
    """Fill host-dependent placeholders used by the rule catalog."""
    if "{uid_min}" in text:
        text = text.replace("{uid_min}", str(inspector.uid_min()))
    return text


def parse_mode(value: Any) -> int:
    """Octal permission from YAML: ``"0640"``, ``"640"`` or an int like 640."""
    text = str(value).strip()
    try:
        return int(text, 8)
    except ValueError as e:
        raise RuleDefinitionError(f"Invalid permission mode: {value!r}") from e
