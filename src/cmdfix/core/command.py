"""The failed command a correction cycle works on."""

from __future__ import annotations

import dataclasses
import shlex
from dataclasses import dataclass
from functools import cached_property


@dataclass(frozen=True)
class Command:
    """A shell command that was run, with its combined stderr and stdout."""

    script: str
    output: str = ""

    @cached_property
    def script_parts(self) -> tuple[str, ...]:
        """Shell-split script, falling back to whitespace split on bad quoting."""
        try:
            return tuple(shlex.split(self.script))
        except ValueError:
            return tuple(self.script.split())

    def update(self, **changes: str) -> Command:
        """Return a copy with ``script`` and/or ``output`` replaced."""
        return dataclasses.replace(self, **changes)

    def __repr__(self) -> str:
        return f"Command(script={self.script!r}, output={self.output!r})"
