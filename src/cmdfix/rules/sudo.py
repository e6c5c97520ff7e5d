"""Retry with sudo when the command failed for lack of privileges."""

from __future__ import annotations

from cmdfix.core.command import Command
from cmdfix.core.rule import Rule

PERMISSION_PATTERNS = (
    "permission denied",
    "eacces",
    "operation not permitted",
    "you cannot perform this operation unless you are root",
    "must be root",
    "need to be root",
    "needs to be run as root",
    "requires superuser privileges",
    "requires root",
    "must have root privileges",
    "only root can",
    "must be superuser",
    "you need root privileges",
    "insufficient permissions",
    "are you root?",
    "please run as root",
    "not allowed to perform this operation",
    "read-only file system",
)

# Already elevated, or a different elevation tool
ELEVATION_COMMANDS = frozenset({"sudo", "su", "pkexec", "doas", "runas"})


class Sudo(Rule):
    """Prepend ``sudo`` on permission errors."""

    name = "sudo"
    priority = 50

    def is_match(self, command: Command) -> bool:
        parts = command.script_parts
        if parts and parts[0].rsplit("/", 1)[-1].lower() in ELEVATION_COMMANDS:
            return False
        output = command.output.lower()
        return any(pattern in output for pattern in PERMISSION_PATTERNS)

    def get_new_command(self, command: Command) -> str:
        script = command.script.strip()
        if "&&" in script or "||" in script or ">" in script:
            escaped = script.replace("\\", "\\\\").replace('"', '\\"')
            return f'sudo sh -c "{escaped}"'
        return f"sudo {script}"
