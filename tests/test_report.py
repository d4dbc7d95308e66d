"""Tests for report generation."""

import csv
import io
import json

import pytest

from hardenguard.models import ComplianceReport, Finding, StatusReport
from hardenguard.report.generator import ReportGenerator


def _make_report():
    statuses = [
        StatusReport("TWGCB-01-008-0171", False, [
            Finding("/etc/audit/rules.d/audit.rules",
                    "(Missing) -w /var/log/faillock -p wa -k logins", ok=False)]),
        StatusReport("TWGCB-01-008-0194", True, [
            Finding("/etc/crontab", "mode 0600 (OK)")]),
        StatusReport("TWGCB-01-008-0146", False, [
            Finding("/etc/audit/auditd.conf", "max_log_file = 8", line_number=7, ok=False)]),
    ]
    return ComplianceReport(
        statuses=statuses,
        titles={
            "TWGCB-01-008-0171": "Ensure Pam_Faillock log file is recorded by auditd",
            "TWGCB-01-008-0194": "Ensure /etc/crontab file permissions",
            "TWGCB-01-008-0146": "Audit log max file size (auditd.conf)",
        },
        compliance_score=33.3,
        summary="Compliance Score: 33.3%",
    )


class TestReportGenerator:
    def test_generate_json(self):
        data = json.loads(ReportGenerator().generate_json(_make_report()))
        assert data["compliance_score"] == 33.3
        assert data["summary"] == {"total_rules_checked": 3, "compliant": 1, "non_compliant": 2}
        assert len(data["rules"]) == 3
        assert data["rules"][2]["findings"][0]["line_number"] == 7

    def test_generate_json_to_file(self, tmp_path):
        out = tmp_path / "reports" / "audit.json"
        ReportGenerator().generate_json(_make_report(), out)
        assert json.loads(out.read_text())["title"] == "HardenGuard Compliance Report"

    def test_generate_csv(self, tmp_path):
        out = tmp_path / "audit.csv"
        text = ReportGenerator().generate_csv(_make_report(), out)
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[0][0] == "Rule ID"
        assert len(rows) == 4
        assert rows[3][4] == "7"
        assert text.endswith("\r\n")
        assert out.read_bytes().decode() == text

    def test_generate_text(self):
        text = ReportGenerator().generate_text(_make_report())
        assert "HARDENGUARD COMPLIANCE REPORT" in text
        assert "Compliance Score: 33.3%" in text
        assert "1. TWGCB-01-008-0171: Ensure Pam_Faillock log file is recorded by auditd" in text
        assert "File: /etc/audit/auditd.conf Line: 7: max_log_file = 8" in text
        assert "TWGCB-01-008-0194" not in text

    def test_generate_dispatch(self):
        gen = ReportGenerator()
        assert gen.generate(_make_report(), "json").startswith("{")
        with pytest.raises(ValueError):
            gen.generate(_make_report(), "pdf")
