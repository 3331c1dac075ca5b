"""GitHub issue and pull request models."""

from dataclasses import dataclass
from enum import Enum


class GithubUrlKind(Enum):
    """What a GitHub URL points at."""
    ISSUE = "issue"
    PR = "pr"


class PullRequestState(Enum):
    """State of a pull request."""
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    MERGED = "MERGED"


@dataclass(frozen=True)
class GithubUrl:
    kind: GithubUrlKind
    owner: str
    repo: str
    number: int


@dataclass(frozen=True)
class IssueInfo:
    number: int
    title: str


@dataclass(frozen=True)
class PullRequestInfo:
    number: int
    branch: str
    state: PullRequestState
