"""Git rules."""

from __future__ import annotations

import re

from cmdfix.core.command import Command
from cmdfix.core.rule import Rule, for_app
from cmdfix.utils.executables import replace_argument

SUGGESTION_HEADERS = ("The most similar command", "Did you mean")


def get_all_matched_commands(output: str, separators: tuple[str, ...] = SUGGESTION_HEADERS) -> list[str]:
    """Collect the suggestions a tool lists below one of ``separators``."""
    matched = []
    collecting = False
    for line in output.splitlines():
        if any(separator in line for separator in separators):
            collecting = True
        elif collecting and line.strip():
            matched.append(line.strip())
    return matched


@for_app("git", "hub")
class GitNotCommand(Rule):
    """Use the subcommand git itself suggests for a misspelled one."""

    name = "git_not_command"

    _broken = re.compile(r"git: '([^']*)' is not a git command")

    def is_match(self, command: Command) -> bool:
        return " is not a git command" in command.output and any(
            header in command.output for header in SUGGESTION_HEADERS
        )

    def get_new_command(self, command: Command) -> list[str]:
        found = self._broken.search(command.output)
        if not found or not found.group(1):
            return []
        broken = found.group(1)
        suggestions = get_all_matched_commands(command.output)
        return [
            replace_argument(command.script, broken, suggestion)
            for suggestion in suggestions[: self.context.num_close_matches]
        ]
