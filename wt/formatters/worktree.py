"""Worktree formatting utilities."""

from typing import List

from wt.formatters.date import format_age
from wt.models.picker import CREATE_VALUE, Choice
from wt.models.worktree import Worktree


def format_worktree_line(worktree: Worktree) -> str:
    """Format a worktree for `wt list`."""
    return f"{worktree.name} ({worktree.branch})"


def format_create_label(term: str) -> str:
    """Label of the synthetic create entry."""
    return f'+ Create "{term}"' if term else "+ Create new"


def worktree_choices(worktrees: List[Worktree], with_age: bool = True) -> List[Choice]:
    """Build picker rows for worktrees, in the given order."""
    return [
        Choice(
            label=wt.name,
            value=wt.path,
            description=format_age(wt.created_at) if with_age else None,
            deletable=not wt.is_main,
        )
        for wt in worktrees
    ]


def create_choice(term: str) -> Choice:
    """The synthetic create entry appended after the matches."""
    return Choice(label=format_create_label(term), value=CREATE_VALUE)
