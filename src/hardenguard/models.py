"""Core data models for HardenGuard."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime


class ExitOutcome(enum.Enum):
    """Terminal outcome of one rule run."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    CANCELED = "canceled"
    FAILED = "failed"

    @property
    def code(self) -> int:
        return {"success": 0, "skipped": 1, "canceled": 2, "failed": 3}[self.value]


class Answer(enum.Enum):
    """Operator answer to the remediation question."""

    YES = "yes"
    NO = "no"
    CANCEL = "cancel"


@dataclass
class Finding:
    """One located piece of evidence in a status report."""

    location: str
    matched_text: str
    line_number: int | None = None
    ok: bool = True

    def format(self) -> str:
        if self.line_number is not None:
            return f"File: {self.location} Line: {self.line_number}: {self.matched_text}"
        return f"{self.location}: {self.matched_text}"


@dataclass
class CheckOutcome:
    """Result of inspecting a single check of a rule."""

    compliant: bool
    findings: list[Finding] = field(default_factory=list)


@dataclass
class StatusReport:
    """Fresh inspection of a rule's current state."""

    rule_id: str
    compliant: bool
    findings: list[Finding] = field(default_factory=list)
    inspected_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def failing(self) -> list[Finding]:
        return [f for f in self.findings if not f.ok]


@dataclass
class StepResult:
    """Outcome of one remediation sub-step."""

    action: str
    success: bool
    detail: str = ""
    optional: bool = False
    changed: bool = False


@dataclass
class RemediationResult:
    """Aggregated outcome of a remediation attempt."""

    steps: list[StepResult] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return all(s.success or s.optional for s in self.steps)

    @property
    def changed(self) -> bool:
        return any(s.changed for s in self.steps)

    @property
    def failed_steps(self) -> list[StepResult]:
        return [s for s in self.steps if not s.success and not s.optional]


@dataclass
class RunResult:
    """Everything observed while driving one rule through its lifecycle."""

    rule_id: str
    outcome: ExitOutcome
    before: StatusReport | None = None
    after: StatusReport | None = None
    remediation: RemediationResult | None = None
    message: str = ""

    @property
    def exit_code(self) -> int:
        return self.outcome.code


@dataclass
class ComplianceReport:
    """A read-only audit across many rules."""

    report_id: str = field(default_factory=lambda: str(uuid.uuid4())[:12])
    title: str = "HardenGuard Compliance Report"
    generated_at: datetime = field(default_factory=datetime.utcnow)
    host_root: str = "/"
    statuses: list[StatusReport] = field(default_factory=list)
    titles: dict[str, str] = field(default_factory=dict)
    compliance_score: float = 0.0
    summary: str = ""

    @property
    def total_rules_checked(self) -> int:
        return len(self.statuses)

    @property
    def compliant_count(self) -> int:
        return sum(1 for s in self.statuses if s.compliant)

    @property
    def non_compliant(self) -> list[StatusReport]:
        return [s for s in self.statuses if not s.compliant]
