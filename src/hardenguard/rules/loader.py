"""YAML rule loader — builds rules from catalog files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from hardenguard.checks import build_check
from hardenguard.errors import HardenGuardError, RuleDefinitionError
from hardenguard.rules.rule import ReloadSpec, Rule

logger = logging.getLogger(__name__)

BUILTIN_DIR = Path(__file__).parent / "builtin"


class RuleLoader:
    """Load rules from YAML catalog files.

    A catalog file holds a top-level ``rules`` list. File-level
    ``requires_privilege`` and ``tags`` act as defaults for every rule in it.
    A malformed rule is logged and skipped; the rest of the file still loads.
    """

    def load_file(self, filepath: str | Path) -> list[Rule]:
        """Load rules from a single YAML file."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Rule file not found: {filepath}")

        with open(filepath) as f:
            data = yaml.safe_load(f)

        if not data or "rules" not in data:
            logger.warning("No rules found in %s", filepath)
            return []

        defaults = {
            "requires_privilege": data.get("requires_privilege", True),
            "tags": data.get("tags", []),
        }
        rules = []
        for rule_data in data["rules"] or []:
            try:
                rule = self._parse_rule(rule_data, defaults)
            except (HardenGuardError, KeyError, TypeError, ValueError) as e:
                logger.warning("Failed to parse rule in %s: %s", filepath, e)
                continue
            rule.source = str(filepath)
            rules.append(rule)

        logger.info("Loaded %d rules from %s", len(rules), filepath.name)
        return rules

    def load_directory(self, dirpath: str | Path) -> list[Rule]:
        """Load all rule files from a directory."""
        dirpath = Path(dirpath)
        if not dirpath.is_dir():
            raise FileNotFoundError(f"Rules directory not found: {dirpath}")
        rules = []
        for filepath in sorted(dirpath.rglob("*.yml")):
            rules.extend(self.load_file(filepath))
        for filepath in sorted(dirpath.rglob("*.yaml")):
            rules.extend(self.load_file(filepath))
        return rules

    def load_builtin_rules(self) -> list[Rule]:
        """Load the catalog shipped inside the package."""
        if BUILTIN_DIR.exists():
            return self.load_directory(BUILTIN_DIR)
        logger.warning("Built-in rules directory not found at %s", BUILTIN_DIR)
        return []

    def _parse_rule(self, data: dict[str, Any], defaults: dict[str, Any]) -> Rule:
        """Parse a single rule from YAML data."""
        if not isinstance(data, dict):
            raise RuleDefinitionError(f"Rule must be a mapping, got {type(data).__name__}")
        rule_id = str(data["id"])
        raw_checks = data.get("checks") or []
        if not raw_checks:
            raise RuleDefinitionError(f"Rule {rule_id} has no checks")

        tags = data.get("tags", defaults["tags"])
        if isinstance(tags, str):
            tags = [tags]

        return Rule(
            rule_id=rule_id,
            title=data["title"],
            description=data.get("description", ""),
            checks=[build_check(c) for c in raw_checks],
            requires_privilege=bool(data.get("requires_privilege", defaults["requires_privilege"])),
            requires_reboot=bool(data.get("requires_reboot", False)),
            reload=self._parse_reload(data.get("reload")),
            prompt=data.get("prompt", ""),
            note=data.get("note", ""),
            tags=list(tags),
        )

    @staticmethod
    def _parse_reload(data: Any) -> ReloadSpec | None:
        if data is None:
            return None
        if isinstance(data, str):
            return ReloadSpec(service=data)
        if not isinstance(data, dict):
            raise RuleDefinitionError(f"Invalid reload entry: {data!r}")
        command = data.get("command") or []
        if isinstance(command, str):
            command = command.split()
        if not command and not data.get("service"):
            raise RuleDefinitionError("reload needs 'service' or 'command'")
        return ReloadSpec(
            service=str(data.get("service", "")),
            action=str(data.get("action", "reload")),
            command=[str(c) for c in command],
            always=bool(data.get("always", False)),
        )
