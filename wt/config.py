"""Configuration handling for wt"""

import os
from dataclasses import dataclass, field
from typing import Optional, List


def _default_worktree_base() -> str:
    return os.environ.get("WT_BASE") or os.path.join(os.path.expanduser("~"), ".wt")


@dataclass
class Config:
    """Configuration for wt with validation."""

    # Worktree layout
    worktree_base: str = field(default_factory=_default_worktree_base)
    main_branches: List[str] = field(default_factory=lambda: ["main", "master"])
    remote_name: str = "origin"

    # Picker
    max_visible_rows: int = 10

    # Post-create setup
    install_dependencies: bool = True
    copy_ignored_files: bool = True

    # GitHub integration
    github_token: Optional[str] = None

    # Logging
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_worktree_base()
        self._validate_main_branches()
        self._validate_remote_name()
        self._validate_max_visible_rows()
        self._resolve_github_token()

    def _validate_worktree_base(self):
        """Validate worktree_base is set and expand the user directory."""
        if not self.worktree_base or not self.worktree_base.strip():
            raise ValueError("worktree_base cannot be empty")
        self.worktree_base = os.path.expanduser(self.worktree_base.strip())

    def _validate_main_branches(self):
        """Validate main_branches is a non-empty list of names."""
        if not isinstance(self.main_branches, list):
            raise ValueError("main_branches must be a list")
        names = [name.strip() for name in self.main_branches if name and name.strip()]
        if not names:
            raise ValueError("main_branches must name at least one branch")
        self.main_branches = names

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_max_visible_rows(self):
        """Validate max_visible_rows is positive."""
        if self.max_visible_rows <= 0:
            raise ValueError(f"max_visible_rows must be positive, got {self.max_visible_rows}")

    def _resolve_github_token(self):
        """Fall back to the GITHUB_TOKEN environment variable."""
        if not self.github_token:
            self.github_token = os.environ.get("GITHUB_TOKEN") or None

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "worktree_base": self.worktree_base,
            "main_branches": self.main_branches,
            "remote_name": self.remote_name,
            "max_visible_rows": self.max_visible_rows,
            "install_dependencies": self.install_dependencies,
            "copy_ignored_files": self.copy_ignored_files,
            "github_token": self.github_token,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key, dict style."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        # Extract only known fields
        known_fields = {
            "worktree_base",
            "main_branches",
            "remote_name",
            "max_visible_rows",
            "install_dependencies",
            "copy_ignored_files",
            "github_token",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
