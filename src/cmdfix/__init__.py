"""cmdfix - suggest corrections for failed shell commands."""

__version__ = "0.1.0"

# Public API, imported lazily
def __getattr__(name: str):
    """Lazy import of the public API."""
    if name in ("Command", "CorrectedCommand", "Corrector", "Rule", "RuleContext"):
        from cmdfix import core
        return getattr(core, name)
    elif name == "Settings":
        from cmdfix.config.settings import Settings
        return Settings
    elif name in ("SelectionMachine", "SelectionState"):
        from cmdfix import selection
        return getattr(selection, name)
    elif name == "FuzzyMatcher":
        from cmdfix.utils.fuzzy import FuzzyMatcher
        return FuzzyMatcher
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "Command",
    "CorrectedCommand",
    "Corrector",
    "FuzzyMatcher",
    "Rule",
    "RuleContext",
    "SelectionMachine",
    "SelectionState",
    "Settings",
]
