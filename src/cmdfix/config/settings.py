"""Runtime settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cmdfix.core.rule import Rule

ALL_RULES = "ALL"


@dataclass
class Settings:
    """Settings for a correction cycle.

    ``rules`` lists the enabled rule names; ``ALL`` stands for every rule
    that is enabled by default. ``exclude_rules`` always wins.
    """

    rules: list[str] = field(default_factory=lambda: [ALL_RULES])
    exclude_rules: list[str] = field(default_factory=list)
    require_confirmation: bool = True
    rule_timeout: float | None = 1.0  # seconds per rule, None disables
    side_effect_timeout: float | None = 15.0
    priority: dict[str, int] = field(default_factory=dict)
    workers: int = 0  # 0 evaluates rules sequentially
    num_close_matches: int = 3
    excluded_search_path_prefixes: list[str] = field(default_factory=list)
    debug: bool = False

    def is_rule_enabled(self, rule: Rule) -> bool:
        """Check whether a rule takes part in correction cycles."""
        if rule.name in self.exclude_rules:
            return False
        if rule.name in self.rules:
            return True
        return ALL_RULES in self.rules and rule.enabled_by_default

    def get_rule_priority(self, rule: Rule) -> int:
        return self.priority.get(rule.name, rule.priority)
