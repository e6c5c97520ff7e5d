"""Base class and helpers for correction rules."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cmdfix.utils.executables import ExecutableCache

if TYPE_CHECKING:
    from cmdfix.core.command import Command

DEFAULT_PRIORITY = 1000


@dataclass
class RuleContext:
    """Long-lived state shared by every rule in a catalog.

    The executable cache is the only mutable resource rules may touch while
    matching.
    """

    executables: ExecutableCache = field(default_factory=ExecutableCache)
    num_close_matches: int = 3


class Rule(ABC):
    """A heuristic that recognizes a failed command and proposes fixes.

    Subclasses set ``name`` and optionally override the other class
    attributes. ``is_match`` and ``get_new_command`` must not modify any
    state: the corrector may call them from several threads at once.
    """

    name: str = ""
    priority: int = DEFAULT_PRIORITY
    enabled_by_default: bool = True
    requires_output: bool = True

    def __init__(self, context: RuleContext | None = None) -> None:
        self.context = context or RuleContext()

    @abstractmethod
    def is_match(self, command: Command) -> bool:
        """Check whether this rule can fix the command."""

    @abstractmethod
    def get_new_command(self, command: Command) -> str | Sequence[str]:
        """Return replacement script(s), best first."""

    def side_effect(self, command: Command, script: str) -> None:
        """Run after the user picked one of this rule's fixes. No-op by default."""

    @property
    def has_side_effect(self) -> bool:
        return type(self).side_effect is not Rule.side_effect

    def __repr__(self) -> str:
        return f"<Rule {self.name} priority={self.priority}>"


def _executable_name(part: str) -> str:
    name = part.replace("\\", "/").rsplit("/", 1)[-1]
    if name.lower().endswith(".exe"):
        name = name[:-4]
    return name


def is_app(command: Command, *app_names: str) -> bool:
    """Check whether the command runs one of ``app_names``.

    Path-qualified executables (``/usr/bin/git``, ``C:\\git\\git.exe``) count.
    """
    parts = command.script_parts
    if not parts:
        return False
    return _executable_name(parts[0]) in app_names


def for_app(*app_names: str):
    """Class decorator restricting a rule's ``is_match`` to the given apps."""

    def decorator(cls: type[Rule]) -> type[Rule]:
        original = cls.is_match

        def is_match(self: Rule, command: Command) -> bool:
            return is_app(command, *app_names) and original(self, command)

        is_match.__doc__ = original.__doc__
        cls.is_match = is_match
        cls.app_names = app_names
        return cls

    return decorator
