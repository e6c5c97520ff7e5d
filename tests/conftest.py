"""Shared fixtures."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import pytest

from cmdfix.core.catalog import reset_catalog
from cmdfix.core.command import Command
from cmdfix.core.rule import Rule


class StubRule(Rule):
    """Configurable rule that counts how it is called."""

    def __init__(
        self,
        name: str,
        candidates=(),
        priority: int = 1000,
        matches: bool | Callable[[Command], bool] = True,
        requires_output: bool = False,
        enabled_by_default: bool = True,
        fail_in: str | None = None,
        delay: float = 0.0,
    ) -> None:
        super().__init__()
        self.name = name
        self.priority = priority
        self.requires_output = requires_output
        self.enabled_by_default = enabled_by_default
        self.candidates = candidates
        self.matches = matches
        self.fail_in = fail_in
        self.delay = delay
        self.match_calls = 0
        self.new_command_calls = 0

    def is_match(self, command: Command) -> bool:
        self.match_calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.fail_in == "is_match":
            raise RuntimeError(f"{self.name} exploded in is_match")
        if callable(self.matches):
            return self.matches(command)
        return self.matches

    def get_new_command(self, command: Command):
        self.new_command_calls += 1
        if self.fail_in == "get_new_command":
            raise RuntimeError(f"{self.name} exploded in get_new_command")
        return self.candidates


class SideEffectRule(StubRule):
    """Stub rule with a side effect recording its calls."""

    def __init__(self, name: str, candidates=(), effect: Callable | None = None, **kwargs) -> None:
        super().__init__(name, candidates, **kwargs)
        self.effect = effect
        self.side_effect_calls: list[tuple[Command, str]] = []

    def side_effect(self, command: Command, script: str) -> None:
        self.side_effect_calls.append((command, script))
        if self.effect is not None:
            self.effect(command, script)


@pytest.fixture
def make_rule():
    """Factory for stub rules."""
    return StubRule


@pytest.fixture
def make_side_effect_rule():
    """Factory for stub rules with a side effect."""
    return SideEffectRule


@pytest.fixture(autouse=True)
def fresh_catalog():
    """Each test starts without a process-wide catalog."""
    reset_catalog()
    yield
    reset_catalog()


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo the CLI's logging setup so caplog sees cmdfix records."""
    yield
    logger = logging.getLogger("cmdfix")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
