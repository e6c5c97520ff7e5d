"""Helpers shared by the corrector and by rules."""

from .executables import ExecutableCache, replace_argument
from .fuzzy import FuzzyMatcher, get_close_matches, get_closest, similarity

__all__ = [
    "ExecutableCache",
    "FuzzyMatcher",
    "get_close_matches",
    "get_closest",
    "replace_argument",
    "similarity",
]
