"""Fuzzy matching of a word against a closed vocabulary."""

from __future__ import annotations

from collections.abc import Iterable

from thefuzz import fuzz

DEFAULT_LIMIT = 3
DEFAULT_CUTOFF = 0.6


def similarity(a: str, b: str) -> float:
    """Normalized similarity of two strings, from 0.0 to 1.0."""
    if not a or not b:
        return 1.0 if a == b else 0.0
    return fuzz.ratio(a, b) / 100.0


class FuzzyMatcher:
    """Finds the closest candidates to a query string."""

    def __init__(self, cutoff: float = DEFAULT_CUTOFF, limit: int = DEFAULT_LIMIT) -> None:
        """Initialize the matcher.

        Args:
            cutoff: Minimum similarity (0.0-1.0) a candidate needs to be returned
            limit: Maximum number of results
        """
        self.cutoff = cutoff
        self.limit = limit

    def match_scored(
        self,
        query: str,
        candidates: Iterable[str],
        limit: int | None = None,
    ) -> list[tuple[str, float]]:
        """Score candidates against the query.

        Args:
            query: The (possibly misspelled) word
            candidates: Vocabulary to search, in a meaningful order
            limit: Overrides the matcher's limit

        Returns:
            Up to ``limit`` (candidate, score) tuples, best first. Equal scores
            keep the order of ``candidates``.
        """
        limit = self.limit if limit is None else limit
        if not query or limit <= 0:
            return []

        scored = []
        for candidate in candidates:
            score = similarity(query, candidate)
            if score >= self.cutoff:
                scored.append((candidate, score))

        # sorted() is stable, so ties stay in candidate order
        scored = sorted(scored, key=lambda item: item[1], reverse=True)
        return scored[:limit]

    def match(
        self,
        query: str,
        candidates: Iterable[str],
        limit: int | None = None,
    ) -> list[str]:
        """Like :meth:`match_scored` without the scores."""
        return [candidate for candidate, _ in self.match_scored(query, candidates, limit)]

    def closest(
        self,
        query: str,
        candidates: Iterable[str],
        fallback_to_first: bool = True,
    ) -> str | None:
        """Return the single best candidate.

        When nothing clears the cutoff, returns the first candidate if
        ``fallback_to_first`` is set, otherwise None.
        """
        candidates = list(candidates)
        matches = self.match(query, candidates, limit=1)
        if matches:
            return matches[0]
        if fallback_to_first and candidates:
            return candidates[0]
        return None


def get_close_matches(
    word: str,
    possibilities: Iterable[str],
    n: int = DEFAULT_LIMIT,
    cutoff: float = DEFAULT_CUTOFF,
) -> list[str]:
    """Return at most ``n`` possibilities scoring at least ``cutoff``, best first."""
    return FuzzyMatcher(cutoff=cutoff, limit=n).match(word, possibilities)


def get_closest(
    word: str,
    possibilities: Iterable[str],
    cutoff: float = DEFAULT_CUTOFF,
    fallback_to_first: bool = True,
) -> str | None:
    return FuzzyMatcher(cutoff=cutoff, limit=1).closest(word, possibilities, fallback_to_first)
