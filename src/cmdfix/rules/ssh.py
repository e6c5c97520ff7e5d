"""Forget a changed SSH host key and reconnect."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from cmdfix.core.command import Command
from cmdfix.core.rule import Rule, for_app

logger = logging.getLogger(__name__)

_CHANGED_KEY = [
    re.compile(r"WARNING: REMOTE HOST IDENTIFICATION HAS CHANGED!"),
    re.compile(r"WARNING: POSSIBLE DNS SPOOFING DETECTED!"),
    re.compile(r"Warning: the \S+ host key for '[^']+' differs from the key for the IP address '[^']+'"),
]
_OFFENDING = re.compile(r"(?:Offending (?:key for IP|\S+ key)|Matching host key) in ([^:]+):(\d+)")


@for_app("ssh", "scp")
class SshKnownHosts(Rule):
    """Rerun the same command after removing the offending known_hosts lines."""

    name = "ssh_known_hosts"

    def is_match(self, command: Command) -> bool:
        return any(pattern.search(command.output) for pattern in _CHANGED_KEY)

    def get_new_command(self, command: Command) -> str:
        return command.script

    def side_effect(self, command: Command, script: str) -> None:
        offending: dict[str, set[int]] = {}
        for path, lineno in _OFFENDING.findall(command.output):
            offending.setdefault(path, set()).add(int(lineno))

        for path, linenos in offending.items():
            known_hosts = Path(path).expanduser()
            lines = known_hosts.read_text().splitlines(keepends=True)
            kept = [line for number, line in enumerate(lines, 1) if number not in linenos]
            known_hosts.write_text("".join(kept))
            logger.info("Removed %d lines from %s", len(lines) - len(kept), known_hosts)
