"""Rule model, YAML rule loader and the lifecycle engine."""

from hardenguard.rules.engine import RuleEngine
from hardenguard.rules.loader import RuleLoader
from hardenguard.rules.rule import ReloadSpec, Rule

__all__ = ["ReloadSpec", "Rule", "RuleEngine", "RuleLoader"]
