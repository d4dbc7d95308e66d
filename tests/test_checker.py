"""Tests for the compliance checker."""

import os

import pytest

from conftest import FAILLOCK_LINE, FakeRunner, RecordingSink, ScriptedPrompt, StaticPrivilege, write
from hardenguard.check.checker import ComplianceChecker
from hardenguard.models import Answer


@pytest.fixture
def checker(rules_dir, host_root):
    return ComplianceChecker(rules_dir=rules_dir, include_builtin=False, root=host_root,
                             runner=FakeRunner(), privilege=StaticPrivilege(),
                             sink=RecordingSink())


class TestComplianceChecker:
    def test_checker_loads_rules(self, checker):
        assert checker.rule_count == 2
        assert [r.rule_id for r in checker.rules] == ["TEST-0001", "TEST-0002"]

    def test_checker_loads_builtin(self, host_root):
        checker = ComplianceChecker(root=host_root, runner=FakeRunner())
        assert checker.rule_count >= 50

    def test_get_rule_unknown(self, checker):
        with pytest.raises(KeyError):
            checker.get_rule("NOPE-1")

    def test_get_rule_by_suffix(self, host_root):
        checker = ComplianceChecker(root=host_root, runner=FakeRunner())
        assert checker.get_rule("0171").rule_id == "TWGCB-01-008-0171"

    def test_custom_rules_override_builtin(self, tmp_path, host_root):
        d = tmp_path / "custom"
        d.mkdir()
        (d / "override.yml").write_text(
            "rules:\n"
            "  - id: TWGCB-01-008-0194\n"
            "    title: Crontab 0644 is fine here\n"
            "    checks: [{type: file_mode, path: /etc/crontab, max_mode: '0644'}]\n"
        )
        checker = ComplianceChecker(rules_dir=d, root=host_root, runner=FakeRunner())
        assert checker.get_rule("TWGCB-01-008-0194").title == "Crontab 0644 is fine here"

    def test_run_rule(self, checker, host_root):
        checker.prompt = ScriptedPrompt(Answer.YES)
        result = checker.run_rule("TEST-0001")
        assert result.exit_code == 0
        text = (host_root / "etc/audit/rules.d/audit.rules").read_text()
        assert text == FAILLOCK_LINE + "\n"
        assert checker.sink.texts("banner") == ["TEST-0001: Faillock log is audited"]
        assert checker.sink.texts("description") == [
            "Failed logins recorded by pam_faillock are watched by auditd."]

    def test_run_rule_non_interactive(self, checker):
        assert checker.run_rule("TEST-0001", interactive=False).exit_code == 1

    def test_banner_without_description(self, checker):
        checker.run_rule("TEST-0002", interactive=False)
        assert checker.sink.texts("banner") == ["TEST-0002: Cron table is private"]
        assert checker.sink.texts("description") == []

    def test_audit_is_read_only(self, checker, host_root):
        crontab = write(host_root, "/etc/crontab")
        os.chmod(crontab, 0o600)
        report = checker.audit()
        assert report.total_rules_checked == 2
        assert report.compliant_count == 1
        assert report.compliance_score == 50.0
        assert report.titles["TEST-0002"] == "Cron table is private"
        assert [s.rule_id for s in report.non_compliant] == ["TEST-0001"]
        assert not (host_root / "etc/audit").exists()

    def test_audit_selected_rules(self, checker, host_root):
        write(host_root, "/etc/audit/rules.d/audit.rules", FAILLOCK_LINE + "\n")
        report = checker.audit(["TEST-0001"])
        assert report.total_rules_checked == 1
        assert report.compliance_score == 100.0
        assert "All checked rules are compliant." in report.summary

    def test_audit_summary(self, checker):
        report = checker.audit()
        assert "Compliance Score: 0.0%" in report.summary
        assert "Non-compliant: 2" in report.summary
