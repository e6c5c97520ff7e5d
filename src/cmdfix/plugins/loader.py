"""Discovery of third-party and user-defined rules."""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from importlib import metadata
from pathlib import Path

from cmdfix.core.rule import Rule

logger = logging.getLogger(__name__)


class RuleLoader:
    """Finds rule classes in entry points and rule directories.

    Packages expose rules through the ``cmdfix.rules`` entry point group;
    each entry point loads a :class:`Rule` subclass or a list of them.
    Rule directories hold plain ``*.py`` files defining subclasses.
    """

    ENTRY_POINT_GROUP = "cmdfix.rules"

    def __init__(self, rule_dirs: list[str | Path] | None = None) -> None:
        """Initialize rule loader.

        Args:
            rule_dirs: Directories to search for rule files
        """
        self.rule_dirs = [Path(d) for d in (rule_dirs or [])]

    def discover(self) -> list[str]:
        """List available rule sources without importing them.

        Returns:
            Source names, ``entry_point:<name>`` or ``file:<path>``
        """
        discovered = [f"entry_point:{ep.name}" for ep in self._entry_points()]
        discovered.extend(f"file:{path}" for path in self._rule_files())
        return discovered

    def load(self) -> list[type[Rule]]:
        """Import every rule source.

        Sources that fail to import are logged and skipped; a broken
        third-party rule must not take the built-in rules down with it.

        Returns:
            Rule classes, entry points first (sorted by name), then files
        """
        classes: list[type[Rule]] = []

        for ep in self._entry_points():
            try:
                loaded = ep.load()
            except Exception as e:
                logger.warning("Error loading rule entry point %s: %s", ep.name, e)
                continue
            classes.extend(self._rule_classes(loaded, source=ep.name))

        for path in self._rule_files():
            try:
                classes.extend(self._load_from_file(path))
            except Exception as e:
                logger.warning("Error loading rule file %s: %s", path, e)

        return classes

    def _entry_points(self) -> list[metadata.EntryPoint]:
        eps = metadata.entry_points(group=self.ENTRY_POINT_GROUP)
        return sorted(eps, key=lambda ep: ep.name)

    def _rule_files(self) -> list[Path]:
        files = []
        for rule_dir in self.rule_dirs:
            if rule_dir.is_dir():
                files.extend(
                    path for path in sorted(rule_dir.glob("*.py")) if path.name != "__init__.py"
                )
        return files

    def _load_from_file(self, path: Path) -> list[type[Rule]]:
        module_name = f"cmdfix_user_rules.{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            return []
        module = importlib.util.module_from_spec(spec)
        # dataclasses look the module up while the file executes
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception:
            del sys.modules[module_name]
            raise

        # Only classes defined in the file itself, not imported helpers
        return [
            obj
            for _, obj in inspect.getmembers(module, inspect.isclass)
            if obj.__module__ == module_name and _is_rule_class(obj)
        ]

    @staticmethod
    def _rule_classes(loaded: object, source: str) -> list[type[Rule]]:
        items = loaded if isinstance(loaded, (list, tuple)) else [loaded]
        classes = []
        for item in items:
            if _is_rule_class(item):
                classes.append(item)
            else:
                logger.warning("Entry point %s provided %r, which is not a Rule subclass", source, item)
        return classes


def _is_rule_class(obj: object) -> bool:
    return isinstance(obj, type) and issubclass(obj, Rule) and not inspect.isabstract(obj)
