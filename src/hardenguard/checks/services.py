"""Runtime state checks: systemd units and the SELinux enforcement mode."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from hardenguard.checks.base import Check, require, run_step
from hardenguard.errors import RuleDefinitionError
from hardenguard.models import CheckOutcome, Finding, StepResult
from hardenguard.system.inspector import SystemInspector
from hardenguard.system.mutator import SystemMutator


@dataclass
class ServiceCheck(Check):
    """A systemd unit is enabled at boot and currently active."""

    check_type = "service"

    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceCheck:
        return cls(name=str(require(data, "name", cls.check_type)))

    def describe(self) -> str:
        return f"service {self.name} enabled and running"

    def inspect(self, inspector: SystemInspector) -> CheckOutcome:
        enabled, active = inspector.service_state(self.name)
        findings = [
            Finding(location=f"service:{self.name}", matched_text=f"is-enabled: {enabled}",
                    ok=enabled == "enabled"),
            Finding(location=f"service:{self.name}", matched_text=f"is-active: {active}",
                    ok=active == "active"),
        ]
        return CheckOutcome(compliant=all(f.ok for f in findings), findings=findings)

    def remediate(self, mutator: SystemMutator,
                  inspector: SystemInspector) -> list[StepResult]:
        return [run_step(f"systemctl --now enable {self.name}",
                         lambda: mutator.enable_service(self.name))]


_SELINUX_MODES = ("enforcing", "permissive")


@dataclass
class SelinuxModeCheck(Check):
    """The running SELinux mode matches ``mode``.

    Switching modes at runtime is best effort: ``setenforce`` cannot leave
    the disabled state without a reboot, so the step is optional and the
    re-check reports the real state. A mode that cannot be read with
    ``getenforce`` counts as non-compliant.
    """

    check_type = "selinux_mode"

    mode: str = "enforcing"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SelinuxModeCheck:
        mode = str(data.get("mode", "enforcing")).lower()
        if mode not in _SELINUX_MODES:
            raise RuleDefinitionError(f"Unknown SELinux mode: {mode}")
        return cls(mode=mode)

    def describe(self) -> str:
        return f"SELinux running in {self.mode} mode"

    def inspect(self, inspector: SystemInspector) -> CheckOutcome:
        current = inspector.selinux_mode()
        if current is None:
            return CheckOutcome(compliant=False, findings=[
                Finding(location="selinux:runtime", matched_text="(getenforce not available)",
                        ok=False)])
        ok = current.lower() == self.mode
        return CheckOutcome(compliant=ok, findings=[
            Finding(location="selinux:runtime", matched_text=current, ok=ok)])

    def remediate(self, mutator: SystemMutator,
                  inspector: SystemInspector) -> list[StepResult]:
        return [run_step(f"setenforce {self.mode}",
                         lambda: mutator.set_selinux_runtime(self.mode), optional=True)]
