"""Audit report rendering."""

from hardenguard.report.generator import ReportGenerator

__all__ = ["ReportGenerator"]
