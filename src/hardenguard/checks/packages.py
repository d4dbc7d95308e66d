"""Package presence/absence checks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from hardenguard.checks.base import Check, as_list, run_step
from hardenguard.errors import RuleDefinitionError
from hardenguard.models import CheckOutcome, Finding, StepResult
from hardenguard.system.inspector import SystemInspector
from hardenguard.system.mutator import SystemMutator


@dataclass
class PackageCheck(Check):
    check_type = "package"

    names: list[str]
    state: str = "installed"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PackageCheck:
        names = as_list(data.get("names")) + as_list(data.get("name"))
        if not names:
            raise RuleDefinitionError("'package' check requires 'name' or 'names'")
        state = str(data.get("state", "installed"))
        if state not in ("installed", "absent"):
            raise RuleDefinitionError(f"Unknown package state: {state}")
        return cls(names=[str(n) for n in names], state=state)

    def describe(self) -> str:
        return f"package(s) {', '.join(self.names)} {self.state}"

    def _wanted(self, installed: bool) -> bool:
        return installed if self.state == "installed" else not installed

    def inspect(self, inspector: SystemInspector) -> CheckOutcome:
        findings = []
        for name in self.names:
            installed = inspector.package_installed(name)
            findings.append(Finding(
                location=f"package:{name}",
                matched_text="installed" if installed else "not installed",
                ok=self._wanted(installed),
            ))
        return CheckOutcome(compliant=all(f.ok for f in findings), findings=findings)

    def remediate(self, mutator: SystemMutator,
                  inspector: SystemInspector) -> list[StepResult]:
        steps = []
        for name in self.names:
            if self._wanted(inspector.package_installed(name)):
                continue
            if self.state == "installed":
                steps.append(run_step(f"install {name}", lambda n=name: mutator.install_package(n)))
            else:
                steps.append(run_step(f"remove {name}", lambda n=name: mutator.remove_package(n)))
        return steps
