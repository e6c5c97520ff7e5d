"""Loading rules from entry points and rule directories."""

from .loader import RuleLoader

__all__ = ["RuleLoader"]
