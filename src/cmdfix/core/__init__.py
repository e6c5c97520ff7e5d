"""Core types: commands, rules, corrections and the corrector."""

from .catalog import RuleCatalog, build_catalog, get_catalog, init_catalog, reset_catalog
from .command import Command
from .corrected import CorrectedCommand, SideEffect
from .corrector import (
    CorrectionResult,
    Corrector,
    RuleDiagnostic,
    RuleOutcome,
    evaluate_rule,
    get_best_correction,
    get_corrected_commands,
    rank,
)
from .rule import DEFAULT_PRIORITY, Rule, RuleContext, for_app, is_app

__all__ = [
    "Command",
    "CorrectedCommand",
    "CorrectionResult",
    "Corrector",
    "DEFAULT_PRIORITY",
    "Rule",
    "RuleCatalog",
    "RuleContext",
    "RuleDiagnostic",
    "RuleOutcome",
    "SideEffect",
    "build_catalog",
    "evaluate_rule",
    "for_app",
    "get_best_correction",
    "get_catalog",
    "get_corrected_commands",
    "init_catalog",
    "is_app",
    "rank",
    "reset_catalog",
]
