"""Fixes for ``cd`` mistakes."""

from __future__ import annotations

import re
import shlex

from cmdfix.core.command import Command
from cmdfix.core.rule import Rule

MISSING_DIR_PATTERNS = (
    "no such file or directory",
    "not a directory",
    "does not exist",
    "cannot find path",
    "the system cannot find the path",
)


class CdParent(Rule):
    """``cd..`` → ``cd ..``"""

    name = "cd_parent"
    priority = 100
    requires_output = False

    _pattern = re.compile(r"^cd(\.+.*)$")

    def is_match(self, command: Command) -> bool:
        return bool(self._pattern.match(command.script.strip()))

    def get_new_command(self, command: Command) -> str:
        rest = self._pattern.match(command.script.strip()).group(1)
        return f"cd {rest.strip()}"


class CdMkdir(Rule):
    """Create the missing directory, then enter it."""

    name = "cd_mkdir"
    priority = 200

    def is_match(self, command: Command) -> bool:
        parts = command.script_parts
        if len(parts) < 2 or parts[0] != "cd":
            return False
        output = command.output.lower()
        return any(pattern in output for pattern in MISSING_DIR_PATTERNS)

    def get_new_command(self, command: Command) -> str:
        directory = shlex.quote(" ".join(command.script_parts[1:]))
        return f"mkdir -p {directory} && cd {directory}"
