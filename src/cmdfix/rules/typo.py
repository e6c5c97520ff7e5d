"""Common command-name typos."""

from __future__ import annotations

import re

from cmdfix.core.command import Command
from cmdfix.core.rule import Rule

NOT_FOUND_PATTERNS = ("command not found", "not recognized", "not found", "unknown command")


class SlLs(Rule):
    """``sl`` → ``ls``"""

    name = "sl_ls"
    priority = 100

    _pattern = re.compile(r"^sl(\s|$)")

    def is_match(self, command: Command) -> bool:
        if not self._pattern.match(command.script.strip()):
            return False
        output = command.output.lower()
        return any(pattern in output for pattern in NOT_FOUND_PATTERNS)

    def get_new_command(self, command: Command) -> str:
        return "ls" + command.script.strip()[2:]
