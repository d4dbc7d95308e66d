"""Checks over configuration file contents and file metadata."""

from __future__ import annotations

import glob
import re
from dataclasses import dataclass
from typing import Any

from hardenguard.checks.base import Check, as_list, parse_mode, render, require, run_step
from hardenguard.errors import RuleDefinitionError
from hardenguard.match import LineMatcher
from hardenguard.models import CheckOutcome, Finding, StepResult
from hardenguard.system.inspector import SystemInspector
from hardenguard.system.mutator import SystemMutator


@dataclass
class RequiredLine:
    """A line that must be present, optionally recognised by a regex."""

    line: str
    pattern: str | None = None

    def matcher(self, inspector: SystemInspector) -> LineMatcher:
        if self.pattern:
            return LineMatcher.regex(render(self.pattern, inspector))
        return LineMatcher.exact(render(self.line, inspector))


@dataclass
class LinePresentCheck(Check):
    """Every required line exists in at least one of ``files``.

    Remediation appends the missing lines to ``target``. With
    ``move_to_end`` existing copies are removed first, so the line is
    guaranteed to close the file (needed for ``-e 2`` in audit rules).
    """

    check_type = "line_present"

    files: list[str]
    required: list[RequiredLine]
    target: str
    move_to_end: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LinePresentCheck:
        files = as_list(require(data, "files", cls.check_type))
        entries = as_list(data.get("lines")) + as_list(data.get("line"))
        if not entries:
            raise RuleDefinitionError("'line_present' check requires 'lines'")
        required = []
        for entry in entries:
            if isinstance(entry, dict):
                required.append(RequiredLine(line=str(require(entry, "line", cls.check_type)),
                                             pattern=entry.get("pattern")))
            else:
                required.append(RequiredLine(line=str(entry)))
        return cls(
            files=[str(f) for f in files],
            required=required,
            target=str(data.get("target", files[0])),
            move_to_end=bool(data.get("move_to_end", False)),
        )

    def describe(self) -> str:
        return f"{len(self.required)} line(s) present in {', '.join(self.files)}"

    def _missing(self, inspector: SystemInspector) -> list[RequiredLine]:
        return [req for req in self.required
                if not inspector.find_lines(self.files, req.matcher(inspector))]

    def inspect(self, inspector: SystemInspector) -> CheckOutcome:
        findings: list[Finding] = []
        for path in self.files:
            if not glob.has_magic(path) and not inspector.exists(path):
                findings.append(Finding(location=path, matched_text="(File not found)", ok=False))
        compliant = True
        for req in self.required:
            matches = inspector.find_lines(self.files, req.matcher(inspector))
            if matches:
                findings.extend(matches)
            else:
                compliant = False
                findings.append(Finding(location=self.target,
                                        matched_text=f"(Missing) {render(req.line, inspector)}",
                                        ok=False))
        return CheckOutcome(compliant=compliant, findings=findings)

    def remediate(self, mutator: SystemMutator,
                  inspector: SystemInspector) -> list[StepResult]:
        steps = [run_step(f"create {self.target}", lambda: mutator.ensure_file(self.target))]
        if not steps[0].success:
            return steps
        pending = self._missing(inspector)
        if self.move_to_end and pending:
            # rewrite the whole block so the required lines close the file in order
            pending = self.required
        for req in pending:
            line = render(req.line, inspector)
            if self.move_to_end:
                matcher = req.matcher(inspector)
                steps.append(run_step(f"remove stale '{line}' from {self.target}",
                                      lambda m=matcher: mutator.remove_lines(self.target, m) > 0))
            steps.append(run_step(f"append '{line}' to {self.target}",
                                  lambda line=line: mutator.append_line(self.target, line)))
        return steps


_COMPARISONS = ("equals", "one_of", "at_least", "at_most", "mode_at_most")


@dataclass
class SettingCheck(Check):
    """The effective value of ``key`` satisfies a comparison.

    The effective value is the last active (uncommented) assignment across
    ``files`` in order, which is how auditd, login.defs and journald read
    their configuration.
    """

    check_type = "setting"

    files: list[str]
    key: str
    comparison: str
    expected: Any
    value: str
    separator: str = "="
    line_format: str = ""
    target: str = ""
    case_sensitive: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SettingCheck:
        files = [str(f) for f in as_list(require(data, "files", cls.check_type))]
        key = str(require(data, "key", cls.check_type))
        present = [c for c in _COMPARISONS if c in data]
        if len(present) != 1:
            raise RuleDefinitionError(
                f"'setting' check for {key} needs exactly one of {', '.join(_COMPARISONS)}")
        comparison = present[0]
        expected = data[comparison]
        if comparison == "one_of":
            expected = [str(v) for v in as_list(expected)]
            default_value = expected[0]
        elif comparison == "mode_at_most":
            parse_mode(expected)
            default_value = str(expected)
        else:
            default_value = str(expected)
        separator = str(data.get("separator", "="))
        if separator not in ("=", " "):
            raise RuleDefinitionError(f"Unsupported separator {separator!r} for {key}")
        return cls(
            files=files,
            key=key,
            comparison=comparison,
            expected=expected,
            value=str(data.get("value", default_value)),
            separator=separator,
            line_format=str(data.get("line_format", "")),
            target=str(data.get("target", files[0])),
            case_sensitive=bool(data.get("case_sensitive", False)),
        )

    def describe(self) -> str:
        return f"{self.key} {self.comparison.replace('_', ' ')} {self.expected} in {', '.join(self.files)}"

    @property
    def _key_pattern(self) -> str:
        sep = r"\s*=\s*" if self.separator == "=" else r"\s+"
        return re.escape(self.key) + sep + r"(?P<value>[^\s#]*)"

    def key_matcher(self) -> LineMatcher:
        return LineMatcher.regex(self._key_pattern)

    def formatted_line(self) -> str:
        if self.line_format:
            return self.line_format.format(key=self.key, value=self.value)
        return f"{self.key}{self.separator}{self.value}"

    def effective(self, inspector: SystemInspector) -> tuple[str | None, list[Finding]]:
        regex = re.compile(self._key_pattern)
        matcher = self.key_matcher()
        value = None
        findings = inspector.find_lines(self.files, matcher)
        for finding in findings:
            m = regex.match(finding.matched_text)
            if m:
                value = m.group("value")
        return value, findings

    def satisfied(self, value: str | None) -> bool:
        if value is None or value == "":
            return False
        if self.comparison == "equals":
            expected = str(self.expected)
            return value == expected if self.case_sensitive else value.lower() == expected.lower()
        if self.comparison == "one_of":
            options = self.expected if self.case_sensitive else [v.lower() for v in self.expected]
            return (value if self.case_sensitive else value.lower()) in options
        if self.comparison == "mode_at_most":
            try:
                return parse_mode(value) & ~parse_mode(self.expected) == 0
            except RuleDefinitionError:
                return False
        try:
            number = int(value)
        except ValueError:
            return False
        if self.comparison == "at_least":
            return number >= int(self.expected)
        return number <= int(self.expected)

    def inspect(self, inspector: SystemInspector) -> CheckOutcome:
        value, findings = self.effective(inspector)
        compliant = self.satisfied(value)
        for finding in findings:
            finding.ok = compliant
        if not findings:
            findings.append(Finding(location=self.target,
                                    matched_text=f"(No active {self.key} setting found)",
                                    ok=False))
        return CheckOutcome(compliant=compliant, findings=findings)

    def remediate(self, mutator: SystemMutator,
                  inspector: SystemInspector) -> list[StepResult]:
        line = self.formatted_line()
        steps = [run_step(f"set '{line}' in {self.target}",
                          lambda: mutator.set_key_value(self.target, self.key_matcher(), line))]
        # Files read after the target override it; fix offending values there too.
        for path in inspector.expand(self.files):
            if path == self.target:
                continue
            value, _ = SettingCheck(files=[path], key=self.key, comparison=self.comparison,
                                    expected=self.expected, value=self.value,
                                    separator=self.separator).effective(inspector)
            if value is not None and not self.satisfied(value):
                steps.append(run_step(f"set '{line}' in {path}",
                                      lambda p=path: mutator.set_key_value(p, self.key_matcher(), line)))
        return steps


@dataclass
class FileModeCheck(Check):
    """Each path exists and has no permission bit outside ``max_mode``.

    With ``create`` a missing path is created empty before the chmod.
    """

    check_type = "file_mode"

    paths: list[str]
    max_mode: int
    allow_missing: bool = False
    create: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileModeCheck:
        paths = as_list(data.get("paths")) + as_list(data.get("path"))
        if not paths:
            raise RuleDefinitionError("'file_mode' check requires 'path' or 'paths'")
        return cls(paths=[str(p) for p in paths],
                   max_mode=parse_mode(require(data, "max_mode", cls.check_type)),
                   allow_missing=bool(data.get("allow_missing", False)),
                   create=bool(data.get("create", False)))

    def describe(self) -> str:
        return f"mode {self.max_mode:04o} or stricter on {', '.join(self.paths)}"

    def inspect(self, inspector: SystemInspector) -> CheckOutcome:
        findings: list[Finding] = []
        compliant = True
        for path in inspector.expand(self.paths):
            mode = inspector.file_mode(path)
            if mode is None:
                findings.append(Finding(location=path, matched_text="(Not present)",
                                        ok=self.allow_missing))
                compliant = compliant and self.allow_missing
                continue
            ok = mode & ~self.max_mode == 0
            verdict = "OK" if ok else f"too permissive; should be {self.max_mode:04o} or stricter"
            findings.append(Finding(location=path, matched_text=f"mode {mode:04o} ({verdict})", ok=ok))
            compliant = compliant and ok
        return CheckOutcome(compliant=compliant, findings=findings)

    def remediate(self, mutator: SystemMutator,
                  inspector: SystemInspector) -> list[StepResult]:
        steps = []
        for path in inspector.expand(self.paths):
            mode = inspector.file_mode(path)
            if mode is None and self.allow_missing:
                continue
            if mode is not None and mode & ~self.max_mode == 0:
                continue
            if mode is None and self.create:
                steps.append(run_step(f"create {path}", lambda p=path: mutator.ensure_file(p)))
            new_mode = self.max_mode if mode is None else mode & self.max_mode
            steps.append(run_step(f"chmod {new_mode:04o} {path}",
                                  lambda p=path, m=new_mode: mutator.set_mode(p, m)))
        return steps


@dataclass
class FileOwnerCheck(Check):
    """Each path exists and is owned by ``user``:``group``."""

    check_type = "file_owner"

    paths: list[str]
    user: str = "root"
    group: str = "root"
    allow_missing: bool = False
    create: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileOwnerCheck:
        paths = as_list(data.get("paths")) + as_list(data.get("path"))
        if not paths:
            raise RuleDefinitionError("'file_owner' check requires 'path' or 'paths'")
        return cls(paths=[str(p) for p in paths],
                   user=str(data.get("user", "root")),
                   group=str(data.get("group", "root")),
                   allow_missing=bool(data.get("allow_missing", False)),
                   create=bool(data.get("create", False)))

    def describe(self) -> str:
        return f"owned by {self.user}:{self.group}: {', '.join(self.paths)}"

    def inspect(self, inspector: SystemInspector) -> CheckOutcome:
        findings: list[Finding] = []
        compliant = True
        for path in inspector.expand(self.paths):
            owner = inspector.file_owner(path)
            if owner is None:
                findings.append(Finding(location=path, matched_text="(Not present)",
                                        ok=self.allow_missing))
                compliant = compliant and self.allow_missing
                continue
            ok = owner == (self.user, self.group)
            findings.append(Finding(location=path, matched_text=f"owner {owner[0]}:{owner[1]}", ok=ok))
            compliant = compliant and ok
        return CheckOutcome(compliant=compliant, findings=findings)

    def remediate(self, mutator: SystemMutator,
                  inspector: SystemInspector) -> list[StepResult]:
        steps = []
        for path in inspector.expand(self.paths):
            owner = inspector.file_owner(path)
            if owner == (self.user, self.group) or (owner is None and self.allow_missing):
                continue
            if owner is None and self.create:
                steps.append(run_step(f"create {path}", lambda p=path: mutator.ensure_file(p)))
            steps.append(run_step(f"chown {self.user}:{self.group} {path}",
                                  lambda p=path: mutator.set_owner(p, self.user, self.group)))
        return steps
