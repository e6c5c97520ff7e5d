"""The process-wide, fixed-order rule catalog."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Iterable, Iterator

from cmdfix.config.settings import ALL_RULES, Settings
from cmdfix.core.rule import Rule, RuleContext
from cmdfix.errors import ConfigurationError
from cmdfix.utils.executables import ExecutableCache

logger = logging.getLogger(__name__)


class RuleCatalog:
    """An immutable, ordered collection of uniquely named rules."""

    def __init__(self, rules: Iterable[Rule]) -> None:
        self._rules = tuple(rules)
        self.validate()

    def validate(self) -> None:
        """Check that every rule has a non-empty, unique name.

        Raises:
            ConfigurationError: Naming the offending rules
        """
        unnamed = [type(rule).__name__ for rule in self._rules if not rule.name]
        if unnamed:
            raise ConfigurationError(f"Rules without a name: {', '.join(unnamed)}")

        counts = Counter(rule.name for rule in self._rules)
        duplicates = sorted(name for name, count in counts.items() if count > 1)
        if duplicates:
            raise ConfigurationError(f"Duplicate rule names: {', '.join(duplicates)}")

    @property
    def names(self) -> list[str]:
        return [rule.name for rule in self._rules]

    def get(self, name: str) -> Rule | None:
        for rule in self._rules:
            if rule.name == name:
                return rule
        return None

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: object) -> bool:
        return any(rule.name == name for rule in self._rules)


def build_catalog(
    settings: Settings | None = None,
    rule_classes: Iterable[type[Rule]] | None = None,
    rule_dirs: list | None = None,
    context: RuleContext | None = None,
) -> RuleCatalog:
    """Instantiate rules into a validated catalog.

    Args:
        settings: Used for the executable cache and to warn about unknown names
        rule_classes: Defaults to the built-in rules plus discovered plugins
        rule_dirs: Extra directories with user rule files
        context: Shared rule context, created from ``settings`` if omitted

    Raises:
        ConfigurationError: If rule names are missing or duplicated
    """
    settings = settings or Settings()
    if context is None:
        context = RuleContext(
            executables=ExecutableCache(
                excluded_prefixes=settings.excluded_search_path_prefixes,
            ),
            num_close_matches=settings.num_close_matches,
        )

    if rule_classes is None:
        from cmdfix.plugins.loader import RuleLoader
        from cmdfix.rules import BUILTIN_RULES

        rule_classes = [*BUILTIN_RULES, *RuleLoader(rule_dirs).load()]

    catalog = RuleCatalog(cls(context) for cls in rule_classes)

    for name in [*settings.rules, *settings.exclude_rules]:
        if name != ALL_RULES and name not in catalog:
            logger.warning("Settings mention unknown rule %r", name)

    logger.debug("Rule catalog built with %d rules", len(catalog))
    return catalog


_catalog: RuleCatalog | None = None
_catalog_lock = threading.Lock()


def init_catalog(settings: Settings | None = None, rule_dirs: list | None = None) -> RuleCatalog:
    """Build the process-wide catalog. Later calls return the first one."""
    global _catalog
    with _catalog_lock:
        if _catalog is None:
            _catalog = build_catalog(settings, rule_dirs=rule_dirs)
        return _catalog


def get_catalog() -> RuleCatalog:
    """Return the process-wide catalog, building it with defaults if needed."""
    return init_catalog()


def reset_catalog() -> None:
    """Forget the process-wide catalog. Meant for tests."""
    global _catalog
    with _catalog_lock:
        _catalog = None
