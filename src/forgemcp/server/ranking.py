# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Fuzzy ranking for ``completion/complete`` suggestions.

Candidates are bucketed into case-insensitive tiers (exact, prefix, substring,
fuzzy subsequence).  Within the fuzzy tier, greedy left-to-right matching
rewards consecutive runs and matches that land on a word boundary, so ``wa``
prefers ``web-api`` over ``showcase``.  Sorting is stable; equal scores keep the
provider's order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final


MAX_COMPLETION_VALUES: Final[int] = 100

EXACT_SCORE: Final[int] = 1000
PREFIX_SCORE: Final[int] = 900
SUBSTRING_SCORE: Final[int] = 800

_MATCH_POINTS: Final[int] = 10
_RUN_POINTS: Final[int] = 2
_BOUNDARY_POINTS: Final[int] = 20
_BOUNDARY_CHARS: Final[frozenset[str]] = frozenset("-_ ")


@dataclass(frozen=True, slots=True)
class CompletionCandidate:
    value: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class CompletionPage:
    values: list[str]
    total: int
    has_more: bool


def fuzzy_score(value: str, query: str) -> int:
    """Score a subsequence match of ``query`` in ``value``; 0 if it does not match."""
    haystack = value.lower()
    needle = query.lower()
    if not needle:
        return 0

    score = 0
    run = 0
    position = 0
    previous = -2
    for char in needle:
        found = haystack.find(char, position)
        if found < 0:
            return 0
        run = run + 1 if found == previous + 1 else 1
        score += _MATCH_POINTS + _RUN_POINTS * run
        if found == 0 or haystack[found - 1] in _BOUNDARY_CHARS:
            score += _BOUNDARY_POINTS
        previous = found
        position = found + 1
    return score


def _tier(value: str, query: str) -> int:
    haystack = value.lower()
    needle = query.lower()
    if haystack == needle:
        return EXACT_SCORE
    if haystack.startswith(needle):
        return PREFIX_SCORE
    if needle in haystack:
        return SUBSTRING_SCORE
    return 0


def score(value: str, query: str) -> int:
    """Return the tier score for ``value``, falling back to the fuzzy score."""
    return _tier(value, query) or fuzzy_score(value, query)


def rank(
    candidates: Iterable[CompletionCandidate | str],
    query: str,
    *,
    limit: int = MAX_COMPLETION_VALUES,
) -> CompletionPage:
    """Filter and order ``candidates`` against ``query``.

    ``total`` counts every matching candidate; ``values`` holds at most
    ``limit`` of them and ``has_more`` flags the truncation.
    """
    limit = max(0, min(limit, MAX_COMPLETION_VALUES))
    values = [item.value if isinstance(item, CompletionCandidate) else str(item) for item in candidates]

    if query:
        keyed: list[tuple[tuple[int, int], str]] = []
        for value in values:
            tier = _tier(value, query)
            fuzzy = fuzzy_score(value, query)
            if tier or fuzzy:
                keyed.append(((tier, fuzzy), value))
        keyed.sort(key=lambda pair: pair[0], reverse=True)
        matched = [value for _, value in keyed]
    else:
        matched = values

    page = matched[:limit]
    total = len(matched)
    return CompletionPage(values=page, total=total, has_more=len(page) == limit and total > limit)


__all__ = [
    "EXACT_SCORE",
    "MAX_COMPLETION_VALUES",
    "PREFIX_SCORE",
    "SUBSTRING_SCORE",
    "CompletionCandidate",
    "CompletionPage",
    "fuzzy_score",
    "rank",
    "score",
]
