"""A ranked correction candidate."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cmdfix.core.command import Command

SideEffect = Callable[["Command", str], None]


@dataclass(frozen=True)
class CorrectedCommand:
    """One suggested replacement script.

    Two candidates are equal when script and priority are equal; the side
    effect and the producing rule are not part of the identity.
    """

    script: str
    priority: int
    side_effect: SideEffect | None = field(default=None, compare=False)
    rule_name: str | None = field(default=None, compare=False)

    def run_side_effect(self, command: Command) -> bool:
        """Run the attached side effect, if any.

        Returns:
            True if a side effect ran, False if there was none
        """
        if self.side_effect is None:
            return False
        self.side_effect(command, self.script)
        return True

    def __repr__(self) -> str:
        return (
            f"CorrectedCommand(script={self.script!r}, priority={self.priority}, "
            f"side_effect={self.side_effect is not None})"
        )
