"""Suggest a close executable name when a command is not found."""

from __future__ import annotations

import re

from cmdfix.core.command import Command
from cmdfix.core.rule import Rule
from cmdfix.utils.executables import replace_argument
from cmdfix.utils.fuzzy import get_close_matches

_NOT_FOUND = [
    re.compile(r"^(?:\S+: )?(?:line \d+: )?([^:\s]+): (?:command )?not found"),
    re.compile(r"command not found: (\S+)"),
    re.compile(r"[Uu]nknown command:? '?([^'\s]+)"),
    re.compile(r"'([^']+)' is not recognized"),
]

SHELLS = frozenset({"bash", "zsh", "fish", "sh", "dash", "ksh", "tcsh", "powershell", "pwsh", "cmd"})


class NoCommand(Rule):
    """``gti status`` → ``git status``"""

    name = "no_command"

    def _missing_program(self, command: Command) -> str | None:
        parts = command.script_parts
        if not parts:
            return None
        for line in command.output.splitlines():
            for pattern in _NOT_FOUND:
                found = pattern.search(line)
                if found and found.group(1) not in SHELLS:
                    return found.group(1) if found.group(1) == parts[0] else None
        return None

    def _suggestions(self, command: Command) -> list[str]:
        program = self._missing_program(command)
        if program is None or self.context.executables.exists(program):
            return []
        executables = sorted(self.context.executables.all_executables())
        return get_close_matches(program, executables, n=self.context.num_close_matches)

    def is_match(self, command: Command) -> bool:
        return bool(self._suggestions(command))

    def get_new_command(self, command: Command) -> list[str]:
        program = command.script_parts[0]
        return [_replace_program(command.script, program, name) for name in self._suggestions(command)]


def _replace_program(script: str, program: str, name: str) -> str:
    """Swap the leading program name, leaving later arguments alone."""
    replaced = re.sub(rf"^(\s*){re.escape(program)}(?=\s|$)", lambda m: m.group(1) + name, script, count=1)
    if replaced != script:
        return replaced
    return replace_argument(script, program, name)
