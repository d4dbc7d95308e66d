"""Compliance checker — loads the rule catalog and runs or audits rules."""

from __future__ import annotations

import logging
from pathlib import Path

from hardenguard.console import ClickPrompt, ConsoleSink
from hardenguard.models import Answer, ComplianceReport, RunResult, StatusReport
from hardenguard.rules.engine import RuleEngine
from hardenguard.rules.loader import RuleLoader
from hardenguard.rules.rule import Rule
from hardenguard.system.commands import Runner
from hardenguard.system.inspector import SystemInspector
from hardenguard.system.mutator import SystemMutator
from hardenguard.system.privilege import PrivilegeChecker

logger = logging.getLogger(__name__)


class ComplianceChecker:
    """Main orchestrator.

    Loads rules, then either drives one rule through the remediation
    lifecycle (``run_rule``) or inspects many rules read-only (``audit``).
    Rules from ``rules_dir`` replace built-in rules with the same id.
    """

    def __init__(self, rules_dir: str | Path | None = None,
                 include_builtin: bool = True,
                 additional_rules: list[Rule] | None = None,
                 root: str | Path = "/",
                 runner: Runner | None = None,
                 privilege: PrivilegeChecker | None = None,
                 sink: ConsoleSink | None = None,
                 prompt: ClickPrompt | None = None) -> None:
        self.loader = RuleLoader()
        self.inspector = SystemInspector(root, runner)
        self.mutator = SystemMutator(root, runner)
        self.privilege = privilege or PrivilegeChecker()
        self.sink = sink or ConsoleSink()
        self.prompt = prompt
        self._rules: dict[str, Rule] = {}

        if include_builtin:
            self._add_rules(self.loader.load_builtin_rules())

        if rules_dir:
            self._add_rules(self.loader.load_directory(rules_dir))

        if additional_rules:
            self._add_rules(additional_rules)

        logger.info("ComplianceChecker initialized with %d rules", len(self._rules))

    def _add_rules(self, rules: list[Rule]) -> None:
        for rule in rules:
            if rule.rule_id in self._rules:
                logger.info("Rule %s from %s overrides %s", rule.rule_id,
                            rule.source or "caller", self._rules[rule.rule_id].source)
            self._rules[rule.rule_id] = rule

    @property
    def rules(self) -> list[Rule]:
        return sorted(self._rules.values(), key=lambda r: r.rule_id)

    @property
    def rule_count(self) -> int:
        return len(self._rules)

    def get_rule(self, rule_id: str) -> Rule:
        """Look up a rule by id; the numeric suffix alone is accepted too."""
        if rule_id in self._rules:
            return self._rules[rule_id]
        matches = [r for r in self._rules.values() if r.rule_id.endswith(f"-{rule_id}")]
        if len(matches) == 1:
            return matches[0]
        raise KeyError(rule_id)

    def engine(self) -> RuleEngine:
        return RuleEngine(self.inspector, self.mutator, self.privilege,
                          self.sink, self.prompt)

    def run_rule(self, rule_id: str, interactive: bool = True,
                 assume: Answer | None = None) -> RunResult:
        """Drive one rule through inspect, prompt, remediate and re-check."""
        rule = self.get_rule(rule_id)
        self.sink.banner(rule.rule_id, rule.title, rule.description)
        return self.engine().run(rule, interactive=interactive, assume=assume)

    def inspect_rule(self, rule_id: str) -> StatusReport:
        return self.get_rule(rule_id).inspect(self.inspector)

    def audit(self, rule_ids: list[str] | None = None) -> ComplianceReport:
        """Inspect rules without changing anything and score the result."""
        rules = [self.get_rule(r) for r in rule_ids] if rule_ids else self.rules
        report = ComplianceReport(host_root=str(self.inspector.root))
        for rule in rules:
            status = rule.inspect(self.inspector)
            report.statuses.append(status)
            report.titles[rule.rule_id] = rule.title
            logger.debug("%s: %s", rule.rule_id,
                         "compliant" if status.compliant else "non-compliant")

        total = report.total_rules_checked
        report.compliance_score = round(report.compliant_count / total * 100, 1) if total else 100.0
        report.summary = self._generate_summary(report)
        return report

    def _generate_summary(self, report: ComplianceReport) -> str:
        """Generate a short summary for a report."""
        lines = [
            f"Compliance Score: {report.compliance_score}%",
            f"Rules Checked: {report.total_rules_checked}",
            f"  Compliant: {report.compliant_count}",
            f"  Non-compliant: {len(report.non_compliant)}",
        ]

        if not report.non_compliant:
            lines.append("\nAll checked rules are compliant.")
        elif report.compliance_score >= 90:
            lines.append("\nGood compliance posture. Remediate remaining rules with 'hardenguard run'.")
        else:
            lines.append("\nCompliance gaps identified. Review findings and plan remediation.")

        return "\n".join(lines)
