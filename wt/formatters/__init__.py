"""Formatting utilities for wt.

- date: relative ages shown beside picker rows
- worktree: picker rows and list output for worktrees
- text: fitting prompt lines to the terminal width
"""

from .date import format_age
from .worktree import (
    format_worktree_line,
    format_create_label,
    worktree_choices,
    create_choice,
)
from .text import fit_cells, fit_cells_tail, styled_line

__all__ = [
    "format_age",
    "format_worktree_line",
    "format_create_label",
    "worktree_choices",
    "create_choice",
    "fit_cells",
    "fit_cells_tail",
    "styled_line",
]
