"""Git-related services for wt."""

from .worktrees import (
    WorktreeService,
    get_repo_info,
    parse_worktree_porcelain,
    find_worktree,
)

__all__ = [
    "WorktreeService",
    "get_repo_info",
    "parse_worktree_porcelain",
    "find_worktree",
]
