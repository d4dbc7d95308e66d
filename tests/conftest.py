"""Shared test fixtures."""

import builtins
import os
from pathlib import Path

import pytest

from hardenguard.models import Answer
from hardenguard.system.commands import CommandResult
from hardenguard.system.inspector import SystemInspector
from hardenguard.system.mutator import SystemMutator

FAILLOCK_LINE = "-w /var/log/faillock -p wa -k logins"

LOGIN_DEFS = """#
# Please note that the parameters in this configuration file control the
# behavior of the tools from the shadow-utils component.
#
MAIL_DIR	/var/spool/mail
PASS_MAX_DAYS	99999
PASS_MIN_DAYS	0
PASS_WARN_AGE	7
UID_MIN                  1000
UID_MAX                 60000
CREATE_HOME	yes
"""

AUDITD_CONF = """#
# This file controls the configuration of the audit daemon
#
local_events = yes
log_file = /var/log/audit/audit.log
log_format = ENRICHED
max_log_file = 8
num_logs = 5
max_log_file_action = ROTATE
"""

RULES_YAML = """
tags: [audit]
rules:
  - id: TEST-0001
    title: Faillock log is audited
    description: Failed logins recorded by pam_faillock are watched by auditd.
    note: Reboot if auditd is immutable.
    checks:
      - type: line_present
        files: /etc/audit/rules.d/*.rules
        target: /etc/audit/rules.d/audit.rules
        lines: "-w /var/log/faillock -p wa -k logins"
  - id: TEST-0002
    title: Cron table is private
    checks:
      - type: file_mode
        path: /etc/crontab
        max_mode: "0600"
"""


class FakeRunner:
    """Stands in for ``run_cmd``; answers from a table and records calls."""

    def __init__(self, default_rc: int = 0) -> None:
        self.default_rc = default_rc
        self.responses: dict[tuple[str, ...], CommandResult] = {}
        self.calls: list[tuple[str, ...]] = []

    def set(self, argv, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        argv = tuple(argv)
        self.responses[argv] = CommandResult(argv, returncode, stdout, stderr)

    def __call__(self, argv) -> CommandResult:
        argv = tuple(argv)
        self.calls.append(argv)
        if argv in self.responses:
            return self.responses[argv]
        return CommandResult(argv, self.default_rc)

    def called(self, *argv: str) -> bool:
        return tuple(argv) in self.calls


class ScriptedPrompt:
    """Answers the remediation question from a fixed script."""

    def __init__(self, *answers: Answer) -> None:
        self.answers = list(answers)
        self.questions: list[str] = []

    def ask(self, question: str) -> Answer:
        self.questions.append(question)
        return self.answers.pop(0)


class RecordingSink:
    """Collects everything the engine renders."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str]] = []

    def _add(self, kind: str, text: str = "") -> None:
        self.events.append((kind, text))

    def banner(self, rule_id, title, description=""):
        self._add("banner", f"{rule_id}: {title}")
        if description:
            self._add("description", description)

    def line(self, text=""):
        self._add("line", text)

    def report(self, report, heading="Check results:"):
        self._add("report", heading)
        for f in report.findings:
            self._add("finding", f.format())

    def compliant(self, text):
        self._add("compliant", text)

    def non_compliant(self, text):
        self._add("non_compliant", text)

    def step(self, step):
        self._add("step", f"{'ok' if step.success else 'failed'}: {step.action}")

    def success(self, text="Successfully applied."):
        self._add("success", text)

    def failure(self, text="Failed to apply."):
        self._add("failure", text)

    def notice(self, text):
        self._add("notice", text)

    def kinds(self) -> list[str]:
        return [k for k, _ in self.events]

    def texts(self, kind: str) -> list[str]:
        return [t for k, t in self.events if k == kind]


class StaticPrivilege:
    def __init__(self, privileged: bool = True) -> None:
        self.privileged = privileged

    def is_privileged(self) -> bool:
        return self.privileged


def write(root: Path, path: str, content: str = "") -> Path:
    """Create ``path`` (an absolute host path) under ``root``."""
    target = root / path.lstrip("/")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)
    return target


@pytest.fixture
def host_root(tmp_path):
    root = tmp_path / "host"
    root.mkdir()
    return root


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def inspector(host_root, fake_runner):
    return SystemInspector(host_root, fake_runner)


@pytest.fixture
def mutator(host_root, fake_runner):
    return SystemMutator(host_root, fake_runner)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def rules_dir(tmp_path):
    d = tmp_path / "rules"
    d.mkdir()
    (d / "test.yml").write_text(RULES_YAML)
    return d


@pytest.fixture
def locked_audit_dir(monkeypatch, host_root):
    """Deny access below /var/log/audit the way a 0700 root-owned directory does."""
    locked = str(host_root / "var/log/audit") + os.sep

    def deny(real):
        def guarded(path, *args, **kwargs):
            if str(path).startswith(locked):
                raise PermissionError(13, "Permission denied", str(path))
            return real(path, *args, **kwargs)
        return guarded

    monkeypatch.setattr(os, "stat", deny(os.stat))
    monkeypatch.setattr("hardenguard.system.inspector.open", deny(builtins.open), raising=False)
    return "/var/log/audit"
