"""Fuzzy matching of picker queries against worktree names."""

import re
from typing import List, Optional, Sequence, Tuple

from wt.models.picker import MatchResult
from wt.models.worktree import Worktree

_WHITESPACE_RUN = re.compile(r"\s+")

SUBSTRING_BASE_SCORE = 100
SUBSTRING_COVERAGE_WEIGHT = 50
SUBSEQUENCE_CHAR_SCORE = 10
SUBSEQUENCE_ADJACENT_BONUS = 5


def normalize_query(query: str) -> str:
    """Lowercase a query and turn whitespace runs into hyphens.

    A query typed with spaces then matches hyphenated worktree names.
    """
    return _WHITESPACE_RUN.sub("-", query.lower())


def fuzzy_match(query: str, candidate: str) -> MatchResult:
    """Score one query against one candidate.

    A contiguous substring scores ``100 - position + coverage * 50`` so that
    earlier and fuller matches rank first. Otherwise the query characters
    must appear in order: each scores 10, plus 5 when it directly follows
    the previous matched character.

    Args:
        query: Text typed by the user
        candidate: Text to match against

    Returns:
        MatchResult; an empty query matches everything with score 0
    """
    if not query:
        return MatchResult(matched=True, score=0)

    q = normalize_query(query)
    t = candidate.lower()

    pos = t.find(q)
    if pos != -1:
        coverage = len(q) / len(t)
        return MatchResult(
            matched=True,
            score=SUBSTRING_BASE_SCORE - pos + coverage * SUBSTRING_COVERAGE_WEIGHT,
        )

    qi = 0
    score = 0
    last_match = -1
    for ti, ch in enumerate(t):
        if qi == len(q):
            break
        if ch == q[qi]:
            score += SUBSEQUENCE_CHAR_SCORE
            if last_match == ti - 1:
                score += SUBSEQUENCE_ADJACENT_BONUS
            last_match = ti
            qi += 1

    if qi == len(q):
        return MatchResult(matched=True, score=score)
    return MatchResult(matched=False, score=0)


def fuzzy_filter(worktrees: Sequence[Worktree], term: Optional[str]) -> List[Tuple[Worktree, float]]:
    """Match every worktree name and return the matches, best first.

    Python's sort is stable, so equal scores keep their input order.
    """
    scored = []
    for wt in worktrees:
        result = fuzzy_match(term or "", wt.name)
        if result.matched:
            scored.append((wt, result.score))
    scored.sort(key=lambda item: item[1], reverse=True)
    return scored
