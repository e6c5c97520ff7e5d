"""Choosing one correction and running its side effect."""

from .machine import SelectionMachine, SelectionState
from .picker import RichPicker, handle_key

__all__ = ["RichPicker", "SelectionMachine", "SelectionState", "handle_key"]
