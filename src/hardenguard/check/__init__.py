"""Compliance checker orchestrating rule runs and audits."""

from hardenguard.check.checker import ComplianceChecker

__all__ = ["ComplianceChecker"]
