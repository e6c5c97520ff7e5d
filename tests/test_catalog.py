"""Tests for the rule catalog and rule loading."""

import logging

import pytest

from cmdfix.config.settings import Settings
from cmdfix.core.catalog import RuleCatalog, build_catalog, get_catalog, init_catalog
from cmdfix.errors import ConfigurationError
from cmdfix.plugins.loader import RuleLoader
from cmdfix.rules import BUILTIN_RULES

USER_RULE = '''
from cmdfix.core.rule import Rule


class ShoutRule(Rule):
    name = "shout"
    priority = 10

    def is_match(self, command):
        return command.script.islower()

    def get_new_command(self, command):
        return command.script.upper()
'''


DATACLASS_RULE = '''
from dataclasses import dataclass

from cmdfix.core.rule import Rule


@dataclass
class Suggestion:
    script: str


class TypedRule(Rule):
    name = "typed"

    def is_match(self, command):
        return True

    def get_new_command(self, command):
        return Suggestion("fixed").script
'''


class TestRuleCatalog:
    """Test catalog validation and lookup."""

    def test_duplicate_names_rejected(self, make_rule) -> None:
        """Two rules with the same name are a configuration error."""
        with pytest.raises(ConfigurationError, match="Duplicate rule names: twin"):
            RuleCatalog([make_rule("twin"), make_rule("other"), make_rule("twin")])

    def test_empty_name_rejected(self, make_rule) -> None:
        """Every rule needs a name."""
        with pytest.raises(ConfigurationError, match="without a name"):
            RuleCatalog([make_rule("")])

    def test_order_and_lookup(self, make_rule) -> None:
        """Iteration follows construction order."""
        catalog = RuleCatalog([make_rule("b"), make_rule("a")])

        assert catalog.names == ["b", "a"]
        assert len(catalog) == 2
        assert "a" in catalog
        assert catalog.get("a").name == "a"
        assert catalog.get("missing") is None


class TestBuildCatalog:
    """Test catalog construction."""

    def test_builtin_rules(self) -> None:
        """The default catalog holds every built-in rule, in order."""
        catalog = build_catalog()
        assert catalog.names[: len(BUILTIN_RULES)] == [cls.name for cls in BUILTIN_RULES]

    def test_context_from_settings(self) -> None:
        """Rules share one context built from the settings."""
        catalog = build_catalog(Settings(num_close_matches=7))
        contexts = {id(rule.context) for rule in catalog}

        assert len(contexts) == 1
        assert next(iter(catalog)).context.num_close_matches == 7

    def test_unknown_rule_names_warn(self, caplog) -> None:
        """Misspelled rule names in settings are reported."""
        with caplog.at_level(logging.WARNING, logger="cmdfix.core.catalog"):
            build_catalog(Settings(rules=["ALL", "sudoo"], exclude_rules=["nope"]))

        assert "'sudoo'" in caplog.text
        assert "'nope'" in caplog.text

    def test_user_rule_directory(self, tmp_path) -> None:
        """Rule files in a rules directory join the catalog after the built-ins."""
        (tmp_path / "shout.py").write_text(USER_RULE)

        catalog = build_catalog(rule_dirs=[tmp_path])

        assert catalog.names[-1] == "shout"

    def test_user_rule_name_clash(self, tmp_path) -> None:
        """A user rule reusing a built-in name is rejected."""
        (tmp_path / "clash.py").write_text(USER_RULE.replace('"shout"', '"sudo"'))

        with pytest.raises(ConfigurationError, match="sudo"):
            build_catalog(rule_dirs=[tmp_path])


class TestProcessCatalog:
    """Test the process-wide catalog."""

    def test_initialized_once(self) -> None:
        """Later initialization calls return the first catalog."""
        first = init_catalog(Settings())
        second = init_catalog(Settings(num_close_matches=9))

        assert first is second
        assert get_catalog() is first

    def test_get_builds_default(self) -> None:
        """Reading before initializing builds the default catalog."""
        assert "sudo" in get_catalog()


class TestRuleLoader:
    """Test rule discovery."""

    def test_rule_file_using_dataclass(self, tmp_path) -> None:
        """Rule files can use decorators that look up their own module."""
        (tmp_path / "typed.py").write_text(DATACLASS_RULE)

        classes = RuleLoader([tmp_path]).load()

        assert [cls.name for cls in classes] == ["typed"]
        assert classes[0]().get_new_command(None) == "fixed"

    def test_load_from_directory(self, tmp_path) -> None:
        """Only rule classes defined in the file are picked up."""
        (tmp_path / "shout.py").write_text(USER_RULE)
        (tmp_path / "__init__.py").write_text("")

        classes = RuleLoader([tmp_path]).load()

        assert [cls.name for cls in classes] == ["shout"]

    def test_discover_lists_files(self, tmp_path) -> None:
        """Discovery reports files without importing them."""
        (tmp_path / "shout.py").write_text(USER_RULE)

        assert f"file:{tmp_path / 'shout.py'}" in RuleLoader([tmp_path]).discover()

    def test_broken_file_is_skipped(self, tmp_path, caplog) -> None:
        """A file that fails to import is logged, the rest still load."""
        (tmp_path / "a_broken.py").write_text("raise RuntimeError('boom')\n")
        (tmp_path / "shout.py").write_text(USER_RULE)

        with caplog.at_level(logging.WARNING, logger="cmdfix.plugins.loader"):
            classes = RuleLoader([tmp_path]).load()

        assert [cls.name for cls in classes] == ["shout"]
        assert "boom" in caplog.text

    def test_missing_directory(self, tmp_path) -> None:
        """Nonexistent directories are ignored."""
        assert RuleLoader([tmp_path / "nope"]).load() == []
