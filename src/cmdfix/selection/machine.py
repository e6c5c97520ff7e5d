"""Selection and execution of one correction out of the ranked list."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from enum import Enum

from cmdfix.core.command import Command
from cmdfix.core.corrected import CorrectedCommand
from cmdfix.errors import SelectionError, SideEffectError

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05


class SelectionState(Enum):
    """States of a selection."""

    NO_CANDIDATES = "no_candidates"
    PRESENTING = "presenting"
    SELECTED = "selected"
    SIDE_EFFECT_RUNNING = "side_effect_running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset(
    {SelectionState.NO_CANDIDATES, SelectionState.COMPLETED, SelectionState.CANCELLED}
)

_TRANSITIONS = {
    SelectionState.PRESENTING: {SelectionState.SELECTED, SelectionState.CANCELLED},
    SelectionState.SELECTED: {SelectionState.SIDE_EFFECT_RUNNING, SelectionState.COMPLETED},
    SelectionState.SIDE_EFFECT_RUNNING: {SelectionState.COMPLETED, SelectionState.CANCELLED},
}

Picker = Callable[["SelectionMachine"], None]


class SelectionMachine:
    """Walks the user from a ranked list to exactly one script, or none.

    The machine starts in ``PRESENTING`` (or ``NO_CANDIDATES`` for an empty
    list). A picker moves the cursor and calls :meth:`confirm` or
    :meth:`cancel`. Confirming runs the chosen candidate's side effect, if
    any; side effect failures are collected in :attr:`warnings` and never
    prevent the script from being returned.
    """

    def __init__(
        self,
        command: Command,
        corrections: Sequence[CorrectedCommand],
        side_effect_timeout: float | None = None,
    ) -> None:
        """Initialize the machine.

        Args:
            command: The original failed command, handed to side effects
            corrections: Ranked candidates, best first
            side_effect_timeout: Seconds to wait for a side effect, None waits forever
        """
        self.command = command
        self.corrections: tuple[CorrectedCommand, ...] = tuple(corrections)
        self.side_effect_timeout = side_effect_timeout
        self.index = 0
        self.selected: CorrectedCommand | None = None
        self.warnings: list[SideEffectError] = []

        self._cancel_requested = threading.Event()
        self._lock = threading.Lock()
        self.state = SelectionState.PRESENTING if self.corrections else SelectionState.NO_CANDIDATES
        self.history: list[SelectionState] = [self.state]

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def current(self) -> CorrectedCommand | None:
        """The candidate under the cursor."""
        if not self.corrections:
            return None
        return self.corrections[self.index]

    @property
    def result(self) -> str | None:
        """The final script once completed, otherwise None."""
        if self.state is SelectionState.COMPLETED and self.selected is not None:
            return self.selected.script
        return None

    def select_next(self) -> CorrectedCommand:
        self._require(SelectionState.PRESENTING, "navigate")
        self.index = (self.index + 1) % len(self.corrections)
        return self.corrections[self.index]

    def select_previous(self) -> CorrectedCommand:
        self._require(SelectionState.PRESENTING, "navigate")
        self.index = (self.index - 1) % len(self.corrections)
        return self.corrections[self.index]

    def select_first(self) -> CorrectedCommand:
        self._require(SelectionState.PRESENTING, "navigate")
        self.index = 0
        return self.corrections[0]

    def select_last(self) -> CorrectedCommand:
        self._require(SelectionState.PRESENTING, "navigate")
        self.index = len(self.corrections) - 1
        return self.corrections[self.index]

    def confirm(self) -> str | None:
        """Accept the candidate under the cursor and finish the selection.

        Returns:
            The chosen script, or None if the selection was cancelled while
            its side effect was running
        """
        self._require(SelectionState.PRESENTING, "confirm")
        self.selected = self.corrections[self.index]
        self._transition(SelectionState.SELECTED)

        if self.selected.side_effect is not None:
            self._run_side_effect(self.selected)
        else:
            self._transition(SelectionState.COMPLETED)
        return self.result

    def cancel(self) -> None:
        """Abort the selection. No script will be returned.

        Safe to call from another thread while a side effect is running.
        Cancelling an already cancelled selection does nothing.
        """
        with self._lock:
            state = self.state
        if state is SelectionState.CANCELLED:
            return
        if state is SelectionState.SIDE_EFFECT_RUNNING:
            self._cancel_requested.set()
            return
        self._require(SelectionState.PRESENTING, "cancel")
        self._transition(SelectionState.CANCELLED)

    def run(self, picker: Picker | None = None, auto_execute: bool = False) -> str | None:
        """Drive the selection to a terminal state.

        Args:
            picker: Interactive chooser, called while presenting
            auto_execute: Confirm the first candidate without asking

        Returns:
            The final script, or None
        """
        if self.state is SelectionState.NO_CANDIDATES:
            logger.debug("Nothing to select")
            return None

        try:
            if auto_execute or picker is None:
                return self.confirm()
            picker(self)
        except KeyboardInterrupt:
            if not self.finished:
                self.cancel()

        if self.state is SelectionState.PRESENTING:
            # The picker returned without deciding
            self.cancel()
        return self.result

    def _run_side_effect(self, chosen: CorrectedCommand) -> None:
        self._transition(SelectionState.SIDE_EFFECT_RUNNING)
        done = threading.Event()
        errors: list[Exception] = []

        def target() -> None:
            try:
                chosen.run_side_effect(self.command)
            except Exception as e:
                errors.append(e)
            finally:
                done.set()

        # Daemon thread: a hung side effect must not keep the process alive.
        worker = threading.Thread(target=target, name="cmdfix-side-effect", daemon=True)
        worker.start()

        deadline = None
        if self.side_effect_timeout:
            deadline = time.monotonic() + self.side_effect_timeout
        try:
            while not done.wait(_POLL_INTERVAL):
                if self._cancel_requested.is_set():
                    break
                if deadline is not None and time.monotonic() > deadline:
                    self._warn(chosen, f"side effect timed out after {self.side_effect_timeout}s")
                    break
        except KeyboardInterrupt:
            self._cancel_requested.set()

        if self._cancel_requested.is_set():
            logger.info("Cancelled while running side effect of %r", chosen.rule_name)
            self._transition(SelectionState.CANCELLED)
            return

        for error in errors:
            self._warn(chosen, f"side effect failed: {type(error).__name__}: {error}")
        self._transition(SelectionState.COMPLETED)

    def _warn(self, chosen: CorrectedCommand, message: str) -> None:
        warning = SideEffectError(chosen.rule_name, message)
        logger.warning("%s", warning)
        self.warnings.append(warning)

    def _require(self, state: SelectionState, action: str) -> None:
        if self.state is not state:
            raise SelectionError(f"Cannot {action} in state {self.state.value}")

    def _transition(self, new_state: SelectionState) -> None:
        with self._lock:
            if new_state not in _TRANSITIONS.get(self.state, ()):
                raise SelectionError(
                    f"Illegal transition {self.state.value} -> {new_state.value}"
                )
            logger.debug("Selection %s -> %s", self.state.value, new_state.value)
            self.state = new_state
            self.history.append(new_state)
