"""Rule lifecycle engine: inspect, report, decide, remediate, re-verify."""

from __future__ import annotations

import logging

from hardenguard.console import ClickPrompt, ConsoleSink
from hardenguard.models import Answer, ExitOutcome, RunResult
from hardenguard.rules.rule import Rule
from hardenguard.system.inspector import SystemInspector
from hardenguard.system.mutator import SystemMutator
from hardenguard.system.privilege import PrivilegeChecker

logger = logging.getLogger(__name__)


class RuleEngine:
    """Drives exactly one rule through its lifecycle per ``run`` call.

    The engine never mutates the host itself; only ``Rule.remediate`` does,
    and only after an explicit Yes from the operator (or ``assume``).
    Success is never assumed: the rule is always inspected again afterwards.
    """

    def __init__(self, inspector: SystemInspector | None = None,
                 mutator: SystemMutator | None = None,
                 privilege: PrivilegeChecker | None = None,
                 sink: ConsoleSink | None = None,
                 prompt: ClickPrompt | None = None) -> None:
        self.inspector = inspector or SystemInspector()
        self.mutator = mutator or SystemMutator(self.inspector.root, self.inspector.runner)
        self.privilege = privilege or PrivilegeChecker()
        self.sink = sink or ConsoleSink()
        self.prompt = prompt

    def run(self, rule: Rule, interactive: bool = True,
            assume: Answer | None = None) -> RunResult:
        """Run ``rule`` and return what happened; ``exit_code`` maps the outcome."""
        sink = self.sink
        before = rule.inspect(self.inspector)
        sink.report(before)

        if rule.is_compliant(self.inspector):
            sink.compliant(rule.title)
            logger.info("%s compliant", rule.rule_id)
            return RunResult(rule.rule_id, ExitOutcome.SUCCESS, before=before)
        sink.non_compliant(rule.title)

        answer = assume
        if answer is None:
            if not interactive or self.prompt is None:
                sink.line("Skipped (non-interactive).")
                return RunResult(rule.rule_id, ExitOutcome.SKIPPED, before=before,
                                 message="non-interactive")
            answer = self.prompt.ask(rule.prompt_text)

        if answer is Answer.NO:
            sink.line("Skipped.")
            return RunResult(rule.rule_id, ExitOutcome.SKIPPED, before=before)
        if answer is Answer.CANCEL:
            sink.line("Canceled.")
            return RunResult(rule.rule_id, ExitOutcome.CANCELED, before=before)

        if rule.requires_privilege and not self.privilege.is_privileged():
            sink.failure("Failed to apply: please run as root.")
            logger.warning("%s: remediation refused, not running as root", rule.rule_id)
            return RunResult(rule.rule_id, ExitOutcome.FAILED, before=before,
                             message="permission denied")

        sink.line("Applying remediation...")
        remediation = rule.remediate(self.mutator, self.inspector)
        for step in remediation.steps:
            sink.step(step)
        sink.line()

        after = rule.inspect(self.inspector)
        sink.report(after, heading="Re-check results:")

        if remediation.succeeded and rule.is_compliant(self.inspector):
            sink.success()
            if rule.note:
                sink.notice(f"Note: {rule.note}")
            if rule.requires_reboot:
                sink.notice("Note: changes take full effect after a reboot.")
            logger.info("%s remediated", rule.rule_id)
            return RunResult(rule.rule_id, ExitOutcome.SUCCESS, before=before,
                             after=after, remediation=remediation)

        sink.failure()
        logger.warning("%s still non-compliant after remediation (%d failed step(s))",
                       rule.rule_id, len(remediation.failed_steps))
        return RunResult(rule.rule_id, ExitOutcome.FAILED, before=before,
                         after=after, remediation=remediation)
