"""Kernel-level checks: disabled modules and sysctl parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from hardenguard.checks.base import Check, as_list, require, run_step
from hardenguard.match import LineMatcher
from hardenguard.models import CheckOutcome, Finding, StepResult
from hardenguard.system.inspector import SystemInspector
from hardenguard.system.mutator import SystemMutator


@dataclass
class KernelModuleCheck(Check):
    """A kernel module cannot be loaded and is not loaded now."""

    check_type = "kernel_module"

    module: str
    conf: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KernelModuleCheck:
        module = str(require(data, "module", cls.check_type))
        return cls(module=module, conf=str(data.get("conf", f"/etc/modprobe.d/{module}.conf")))

    @property
    def required_lines(self) -> list[str]:
        return [f"install {self.module} /bin/true", f"blacklist {self.module}"]

    def describe(self) -> str:
        return f"kernel module {self.module} disabled via {self.conf}"

    def inspect(self, inspector: SystemInspector) -> CheckOutcome:
        findings: list[Finding] = []
        loaded = self.module in inspector.loaded_modules()
        findings.append(Finding(location=f"module:{self.module}",
                                matched_text="loaded" if loaded else "not loaded",
                                ok=not loaded))
        if not inspector.exists(self.conf):
            findings.append(Finding(location=self.conf, matched_text="(File not found)", ok=False))
        for line in self.required_lines:
            matches = inspector.find_lines([self.conf], LineMatcher.exact(line))
            if matches:
                findings.extend(matches)
            else:
                findings.append(Finding(location=self.conf, matched_text=f"(Missing) {line}", ok=False))
        return CheckOutcome(compliant=all(f.ok for f in findings), findings=findings)

    def remediate(self, mutator: SystemMutator,
                  inspector: SystemInspector) -> list[StepResult]:
        steps = [run_step(f"append '{line}' to {self.conf}",
                          lambda line=line: mutator.append_line(self.conf, line))
                 for line in self.required_lines]
        if self.module in inspector.loaded_modules():
            steps.append(run_step(f"unload module {self.module}",
                                  lambda: mutator.unload_module(self.module), optional=True))
        return steps


@dataclass
class SysctlCheck(Check):
    """A kernel parameter is set at runtime and persisted for the next boot."""

    check_type = "sysctl"

    key: str
    value: str
    target: str = "/etc/sysctl.d/99-hardenguard.conf"
    # systemd-sysctl reads /etc/sysctl.conf last, as 99-sysctl.conf
    files: list[str] = field(default_factory=lambda: ["/etc/sysctl.d/*.conf", "/etc/sysctl.conf"])

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SysctlCheck:
        check = cls(key=str(require(data, "key", cls.check_type)),
                    value=str(require(data, "value", cls.check_type)))
        if "target" in data:
            check.target = str(data["target"])
        if "files" in data:
            check.files = [str(f) for f in as_list(data["files"])]
        return check

    def describe(self) -> str:
        return f"sysctl {self.key} = {self.value}"

    def _key_matcher(self) -> LineMatcher:
        escaped = self.key.replace(".", r"\.")
        return LineMatcher.regex(escaped + r"\s*=")

    def _persisted(self, inspector: SystemInspector) -> list[Finding]:
        return inspector.find_lines(self.files, self._key_matcher())

    @staticmethod
    def _value_of(text: str) -> str:
        return " ".join(text.split("=", 1)[1].split())

    def inspect(self, inspector: SystemInspector) -> CheckOutcome:
        runtime = inspector.sysctl_value(self.key)
        runtime_ok = runtime == self.value
        findings = [Finding(location=f"sysctl:{self.key}",
                            matched_text=f"runtime = {runtime if runtime is not None else 'missing'}",
                            ok=runtime_ok)]
        persisted = self._persisted(inspector)
        effective = None
        for finding in persisted:
            effective = self._value_of(finding.matched_text)
            finding.ok = effective == self.value
        if not persisted:
            findings.append(Finding(location=self.target,
                                    matched_text=f"(No persistent setting found for {self.key})",
                                    ok=False))
        findings.extend(persisted)
        return CheckOutcome(compliant=runtime_ok and effective == self.value, findings=findings)

    def remediate(self, mutator: SystemMutator,
                  inspector: SystemInspector) -> list[StepResult]:
        line = f"{self.key} = {self.value}"
        steps = []
        for finding in self._persisted(inspector):
            if self._value_of(finding.matched_text) != self.value and finding.location != self.target:
                steps.append(run_step(f"set '{line}' in {finding.location}",
                                      lambda p=finding.location: mutator.set_key_value(p, self._key_matcher(), line)))
        steps.append(run_step(f"set '{line}' in {self.target}",
                              lambda: mutator.set_key_value(self.target, self._key_matcher(), line)))
        steps.append(run_step(f"sysctl -w {self.key}={self.value}",
                              lambda: mutator.set_sysctl(self.key, self.value)))
        return steps
