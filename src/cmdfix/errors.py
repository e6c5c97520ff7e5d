"""Exception types raised by cmdfix."""

from __future__ import annotations


class CmdfixError(Exception):
    """Base class for all cmdfix errors."""


class ConfigurationError(CmdfixError):
    """Invalid settings or rule catalog. Fatal, raised before any cycle runs."""


class SelectionError(CmdfixError):
    """An action was attempted in a selection state that does not allow it."""


class SideEffectError(CmdfixError):
    """A rule side effect failed or timed out after the user picked a fix.

    Never propagated out of the selection machine; it is recorded on the
    machine and logged as a warning.
    """

    def __init__(self, rule_name: str | None, message: str) -> None:
        self.rule_name = rule_name
        super().__init__(f"{rule_name or '<unknown>'}: {message}")
