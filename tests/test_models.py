"""Tests for core data models."""

from hardenguard.models import (
    ComplianceReport,
    ExitOutcome,
    Finding,
    RemediationResult,
    RunResult,
    StatusReport,
    StepResult,
)


class TestExitOutcome:
    def test_codes(self):
        assert ExitOutcome.SUCCESS.code == 0
        assert ExitOutcome.SKIPPED.code == 1
        assert ExitOutcome.CANCELED.code == 2
        assert ExitOutcome.FAILED.code == 3

    def test_run_result_exit_code(self):
        assert RunResult("R1", ExitOutcome.CANCELED).exit_code == 2


class TestFinding:
    def test_format_with_line_number(self):
        f = Finding(location="/etc/audit/rules.d/audit.rules", line_number=3,
                    matched_text="-w /var/log/faillock -p wa -k logins")
        assert f.format() == ("File: /etc/audit/rules.d/audit.rules Line: 3: "
                              "-w /var/log/faillock -p wa -k logins")

    def test_format_without_line_number(self):
        f = Finding(location="package:audit", matched_text="installed")
        assert f.format() == "package:audit: installed"

    def test_status_report_failing(self):
        report = StatusReport("R1", False, [
            Finding("a", "ok"), Finding("b", "bad", ok=False)])
        assert [f.location for f in report.failing] == ["b"]


class TestRemediationResult:
    def test_empty_result_succeeds(self):
        result = RemediationResult()
        assert result.succeeded
        assert not result.changed

    def test_optional_failure_tolerated(self):
        result = RemediationResult([
            StepResult("write", True, changed=True),
            StepResult("setenforce", False, detail="no", optional=True),
        ])
        assert result.succeeded
        assert result.changed
        assert result.failed_steps == []

    def test_required_failure(self):
        result = RemediationResult([
            StepResult("write", False, detail="denied"),
            StepResult("reload", True),
        ])
        assert not result.succeeded
        assert [s.action for s in result.failed_steps] == ["write"]


class TestComplianceReport:
    def test_counts(self):
        report = ComplianceReport(statuses=[
            StatusReport("R1", True), StatusReport("R2", False), StatusReport("R3", True)])
        assert report.total_rules_checked == 3
        assert report.compliant_count == 2
        assert [s.rule_id for s in report.non_compliant] == ["R2"]

    def test_report_id_generated(self):
        assert len(ComplianceReport().report_id) == 12
