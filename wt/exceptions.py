"""Custom exceptions for wt"""

from typing import Optional


class WtError(Exception):
    """Base exception for all wt errors."""
    pass


class GitOperationError(WtError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, target: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.target = target
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if target:
            error_msg += f" for '{target}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class GitHubAPIError(WtError):
    """Exception raised for errors in GitHub API operations."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message

        error_msg = f"GitHub API operation '{operation}' failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class NotInRepositoryError(WtError):
    """Exception raised when the working directory is not inside a git repository."""

    def __init__(self):
        super().__init__("not in a git repository")


class InvalidBranchNameError(WtError):
    """Exception raised when a name cannot be used as a branch name."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(reason)


class NameDerivationError(WtError, ValueError):
    """Exception raised when no branch-safe name can be derived from a title."""

    def __init__(self, title: str):
        self.title = title
        super().__init__("cannot derive a name from this title")


class WorktreeNotFoundError(WtError):
    """Exception raised when no worktree matches a name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"worktree not found: {name}")
