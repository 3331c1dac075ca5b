"""Data models for wt."""

from .worktree import Worktree, RepoInfo, CreateResult, MAIN_WORKTREE_NAME
from .picker import (
    CREATE_VALUE,
    MatchResult,
    Choice,
    Select,
    Create,
    Delete,
    Cancel,
    PickerResult,
)
from .github import GithubUrl, GithubUrlKind, IssueInfo, PullRequestInfo, PullRequestState

__all__ = [
    "Worktree",
    "RepoInfo",
    "CreateResult",
    "MAIN_WORKTREE_NAME",
    "CREATE_VALUE",
    "MatchResult",
    "Choice",
    "Select",
    "Create",
    "Delete",
    "Cancel",
    "PickerResult",
    "GithubUrl",
    "GithubUrlKind",
    "IssueInfo",
    "PullRequestInfo",
    "PullRequestState",
]
