"""Worktree and repository data models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

MAIN_WORKTREE_NAME = "main"


@dataclass(frozen=True)
class Worktree:
    """A worktree of the current repository."""

    path: str
    name: str
    branch: str
    commit: str
    repo_name: str
    created_at: Optional[datetime] = None

    @property
    def is_main(self) -> bool:
        """The main checkout can be switched to but never deleted."""
        return self.name == MAIN_WORKTREE_NAME

    def __str__(self) -> str:
        return f"{self.name} ({self.branch}) @ {self.path}"


@dataclass(frozen=True)
class RepoInfo:
    """Where the repository lives and where its worktrees go."""

    root: str  # Main checkout, even when invoked from a linked worktree
    name: str
    wt_dir: str


@dataclass(frozen=True)
class CreateResult:
    """Outcome of creating or checking out a worktree."""

    path: str
    source_dir: str
    branch: str
