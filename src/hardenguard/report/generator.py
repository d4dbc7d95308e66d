"""Report generator — text, JSON and CSV renderings of an audit."""

from __future__ import annotations

import csv
import io
import json
import logging
from pathlib import Path

from hardenguard.models import ComplianceReport

logger = logging.getLogger(__name__)

FORMATS = ("text", "json", "csv")


class ReportGenerator:
    """Generate audit reports in multiple formats.

    Each ``generate_*`` method returns the rendered report and, when
    ``output_path`` is given, also writes it there.
    """

    def generate(self, report: ComplianceReport, fmt: str = "text",
                 output_path: str | Path | None = None) -> str:
        if fmt not in FORMATS:
            raise ValueError(f"Unknown report format: {fmt}")
        return getattr(self, f"generate_{fmt}")(report, output_path)

    def generate_json(self, report: ComplianceReport,
                      output_path: str | Path | None = None) -> str:
        """Generate a JSON audit report."""
        data = {
            "report_id": report.report_id,
            "title": report.title,
            "generated_at": report.generated_at.isoformat(),
            "host_root": report.host_root,
            "compliance_score": report.compliance_score,
            "summary": {
                "total_rules_checked": report.total_rules_checked,
                "compliant": report.compliant_count,
                "non_compliant": len(report.non_compliant),
            },
            "rules": [
                {
                    "rule_id": s.rule_id,
                    "title": report.titles.get(s.rule_id, ""),
                    "compliant": s.compliant,
                    "inspected_at": s.inspected_at.isoformat(),
                    "findings": [
                        {
                            "location": f.location,
                            "line_number": f.line_number,
                            "text": f.matched_text,
                            "ok": f.ok,
                        }
                        for f in s.findings
                    ],
                }
                for s in report.statuses
            ],
        }

        json_str = json.dumps(data, indent=2)
        self._write(output_path, json_str, "JSON")
        return json_str

    def generate_csv(self, report: ComplianceReport,
                     output_path: str | Path | None = None) -> str:
        """Generate a CSV export, one row per finding."""
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow([
            "Rule ID", "Title", "Compliant", "Location", "Line", "Finding", "Finding OK",
        ])
        for status in report.statuses:
            title = report.titles.get(status.rule_id, "")
            if not status.findings:
                writer.writerow([status.rule_id, title, status.compliant, "", "", "", ""])
            for f in status.findings:
                writer.writerow([
                    status.rule_id,
                    title,
                    status.compliant,
                    f.location,
                    f.line_number if f.line_number is not None else "",
                    f.matched_text,
                    f.ok,
                ])

        text = buf.getvalue()
        self._write(output_path, text, "CSV", newline="")
        return text

    def generate_text(self, report: ComplianceReport,
                      output_path: str | Path | None = None) -> str:
        """Generate a plain text report."""
        lines = [
            "=" * 70,
            report.title.upper(),
            "=" * 70,
            f"Report ID:        {report.report_id}",
            f"Generated:        {report.generated_at.strftime('%Y-%m-%d %H:%M UTC')}",
            f"Host root:        {report.host_root}",
            f"Compliance Score: {report.compliance_score}%",
            "",
            "-" * 70,
            "SUMMARY",
            "-" * 70,
            report.summary or "(no summary)",
            "",
        ]

        if report.non_compliant:
            lines.append("-" * 70)
            lines.append("NON-COMPLIANT RULES")
            lines.append("-" * 70)
            for i, s in enumerate(report.non_compliant, 1):
                lines.append(f"\n{i}. {s.rule_id}: {report.titles.get(s.rule_id, '')}")
                for f in s.failing:
                    lines.append(f"   {f.format()}")

        lines.append("")
        lines.append("=" * 70)
        lines.append("End of Report")
        lines.append("=" * 70)

        text = "\n".join(lines)
        self._write(output_path, text, "Text")
        return text

    @staticmethod
    def _write(output_path: str | Path | None, text: str, kind: str,
               newline: str | None = None) -> None:
        if not output_path:
            return
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", newline=newline) as f:
            f.write(text)
        logger.info("%s report generated: %s", kind, output_path)
