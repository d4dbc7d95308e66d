"""Rule definition: a benchmark item composed of checks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from hardenguard.checks.base import Check, run_step
from hardenguard.errors import HardenGuardError
from hardenguard.models import CheckOutcome, Finding, RemediationResult, StatusReport, StepResult
from hardenguard.system.inspector import SystemInspector
from hardenguard.system.mutator import SystemMutator

logger = logging.getLogger(__name__)


@dataclass
class ReloadSpec:
    """How to make a dependent service pick up edited files."""

    service: str = ""
    action: str = "reload"
    command: list[str] = field(default_factory=list)
    always: bool = False

    def describe(self) -> str:
        if self.command:
            return " ".join(self.command)
        return f"systemctl {self.action} {self.service}"

    def apply(self, mutator: SystemMutator) -> None:
        if self.command:
            mutator.run_reload_command(self.command)
        else:
            mutator.reload_service(self.service, self.action)


@dataclass
class Rule:
    """A single compliance check/remediation unit, one per benchmark item.

    Rules are stateless: every call observes the host afresh through the
    inspector it is given.
    """

    rule_id: str
    title: str
    checks: list[Check]
    description: str = ""
    requires_privilege: bool = True
    requires_reboot: bool = False
    reload: ReloadSpec | None = None
    prompt: str = ""
    note: str = ""
    tags: list[str] = field(default_factory=list)
    source: str = ""

    def _inspect_check(self, check: Check, inspector: SystemInspector) -> CheckOutcome:
        try:
            return check.inspect(inspector)
        except HardenGuardError as e:
            logger.warning("%s: %s", self.rule_id, e)
            return CheckOutcome(compliant=False, findings=[
                Finding(location=check.describe(), matched_text=f"({e})", ok=False)])

    def inspect(self, inspector: SystemInspector) -> StatusReport:
        findings: list[Finding] = []
        compliant = True
        for check in self.checks:
            outcome = self._inspect_check(check, inspector)
            findings.extend(outcome.findings)
            compliant = compliant and outcome.compliant
        return StatusReport(rule_id=self.rule_id, compliant=compliant, findings=findings)

    def is_compliant(self, inspector: SystemInspector) -> bool:
        return all(self._inspect_check(c, inspector).compliant for c in self.checks)

    def remediate(self, mutator: SystemMutator,
                  inspector: SystemInspector) -> RemediationResult:
        """Best-effort: every failing check gets its steps, whatever came before."""
        result = RemediationResult()
        for check in self.checks:
            if self._inspect_check(check, inspector).compliant:
                continue
            try:
                result.steps.extend(check.remediate(mutator, inspector))
            except HardenGuardError as e:
                logger.warning("%s: %s", self.rule_id, e)
                result.steps.append(StepResult(action=check.describe(), success=False, detail=str(e)))

        if self.reload and (result.changed or self.reload.always):
            result.steps.append(run_step(self.reload.describe(),
                                         lambda: self.reload.apply(mutator)))
        return result

    @property
    def prompt_text(self) -> str:
        return f"Apply fix now ({self.prompt})?" if self.prompt else "Apply fix now?"
