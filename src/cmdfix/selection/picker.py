"""Interactive terminal picker for the selection machine."""

from __future__ import annotations

import click
from rich.console import Console, Group
from rich.live import Live
from rich.text import Text

from cmdfix.selection.machine import SelectionMachine

UP_KEYS = {"\x1b[A", "\x1bOA", "k", "\x10"}
DOWN_KEYS = {"\x1b[B", "\x1bOB", "j", "\x0e"}
FIRST_KEYS = {"g", "\x1b[H", "\x1bOH"}
LAST_KEYS = {"G", "\x1b[F", "\x1bOF"}
CONFIRM_KEYS = {"\r", "\n"}
CANCEL_KEYS = {"\x1b", "q", "\x03"}

HELP = "[enter] run  [↑/↓ j/k] move  [esc/ctrl+c] abort"


def handle_key(machine: SelectionMachine, key: str) -> bool:
    """Apply one key press to the machine.

    Returns:
        True once the selection is over
    """
    if key in UP_KEYS:
        machine.select_previous()
    elif key in DOWN_KEYS:
        machine.select_next()
    elif key in FIRST_KEYS:
        machine.select_first()
    elif key in LAST_KEYS:
        machine.select_last()
    elif key in CONFIRM_KEYS:
        machine.confirm()
    elif key in CANCEL_KEYS:
        machine.cancel()
    return machine.finished


def render(machine: SelectionMachine) -> Group:
    lines = []
    for i, correction in enumerate(machine.corrections):
        if i == machine.index:
            lines.append(Text.assemble(("> ", "bold green"), (correction.script, "bold")))
        else:
            lines.append(Text(f"  {correction.script}", style="dim"))
    lines.append(Text(HELP, style="yellow"))
    return Group(*lines)


class RichPicker:
    """Renders the candidates on stderr and reads keys from the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        # stdout is reserved for the chosen script
        self.console = console or Console(stderr=True)

    def __call__(self, machine: SelectionMachine) -> None:
        with Live(render(machine), console=self.console, transient=True, auto_refresh=False) as live:
            while not machine.finished:
                if handle_key(machine, click.getchar()):
                    break
                live.update(render(machine), refresh=True)
