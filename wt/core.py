"""Command orchestration for wt"""
import os
import sys
from typing import List, Optional, TextIO

from rich.console import Console
from rich.markup import escape

from wt.config import Config
from wt.exceptions import (
    GitOperationError,
    InvalidBranchNameError,
    NameDerivationError,
    WorktreeNotFoundError,
    WtError,
)
from wt.formatters import format_worktree_line
from wt.logging_config import get_logger
from wt.models.github import GithubUrlKind, PullRequestState
from wt.models.picker import Create, Delete, Select
from wt.models.worktree import RepoInfo, Worktree
from wt.naming import ensure_valid_branch_name, slugify
from wt.services.git.worktrees import WorktreeService, find_worktree
from wt.services.github_service import GitHubService, is_github_url, parse_github_url
from wt.services.post_create import post_create_setup
from wt.services.shell import format_cd
from wt.ui.picker import delete_picker, picker
from wt.ui.prompts import confirm
from wt.ui.spinner import Spinner
from wt.ui.terminal import TerminalContext
from wt.utils.paths import contains_path

console = Console(stderr=True)
logger = get_logger(__name__)


class WorktreeManager:
    """Runs wt commands for one repository.

    Shell commands (``cd "..."``) go to ``out`` for the shell wrapper to
    evaluate; everything meant for people goes to stderr.
    """

    def __init__(
        self,
        repo_info: RepoInfo,
        config: Config,
        terminal: TerminalContext,
        out: Optional[TextIO] = None,
        worktree_service: Optional[WorktreeService] = None,
        github_service: Optional[GitHubService] = None,
    ):
        self.repo_info = repo_info
        self.config = config
        self.terminal = terminal
        self.out = out or sys.stdout
        self.worktree_service = worktree_service or WorktreeService(repo_info, config)
        self._github_service = github_service

    @property
    def github_service(self) -> GitHubService:
        if self._github_service is None:
            self._github_service = GitHubService(self.config)
        return self._github_service

    def close(self) -> None:
        if self._github_service is not None:
            self._github_service.close()

    def emit_cd(self, path: str, title: Optional[str] = None) -> None:
        print(format_cd(path, title), file=self.out)
        self.out.flush()

    def run(self, words: List[str], yes: bool = False, cwd: Optional[str] = None) -> None:
        """Dispatch a command line (without global flags)."""
        cwd = cwd or os.getcwd()
        command = words[0] if words else None
        rest = words[1:]

        if command and is_github_url(command):
            self.open_github_url(command)
        elif command == "new":
            self.new(" ".join(rest))
        elif command == "checkout":
            if not rest:
                raise WtError("usage: wt checkout <branch>")
            self.checkout(rest[0])
        elif command == "rm":
            self.remove(rest[0] if rest else None, yes=yes, cwd=cwd)
        elif command == "main":
            self.emit_cd(self.worktree_service.get_main_repo_path(), self.repo_info.name)
        elif command == "list":
            self.list_worktrees()
        else:
            self.interactive(" ".join(words), cwd=cwd)

    def _create_and_enter(self, branch: str) -> None:
        with Spinner(f"Creating worktree {escape(branch)}...", console=console):
            result = self.worktree_service.create_worktree(branch)
        post_create_setup(result.path, result.source_dir, self.config)
        self.emit_cd(result.path, result.branch)

    def _checkout_and_enter(self, branch: str) -> None:
        with Spinner(f"Checking out {escape(branch)}...", console=console):
            result = self.worktree_service.checkout_worktree(branch)
        post_create_setup(result.path, result.source_dir, self.config)
        self.emit_cd(result.path, result.branch)

    def new(self, name: str) -> None:
        """Create a worktree named after free text, or from a GitHub URL."""
        if not name:
            raise WtError("usage: wt new <name>")
        if is_github_url(name):
            self.open_github_url(name)
            return
        self._create_and_enter(slugify(name))

    def checkout(self, branch: str) -> None:
        """Create a worktree for an existing (usually remote) branch."""
        self._checkout_and_enter(branch)

    def open_github_url(self, url: str) -> None:
        """Create or enter the worktree for a GitHub issue or pull request.

        Pull requests reuse the checkout that already has their branch.
        Issues get a new branch named ``<slugified title>-<number>``.
        """
        parsed = parse_github_url(url)
        if parsed is None:
            raise WtError("invalid GitHub URL")

        if parsed.kind is GithubUrlKind.PR:
            with Spinner(f"Looking up PR #{parsed.number}...", console=console):
                pr = self.github_service.get_pr_info(parsed.owner, parsed.repo, parsed.number)
            if pr.state is PullRequestState.MERGED:
                raise WtError(f"PR #{pr.number} was already merged")
            if pr.state is PullRequestState.CLOSED:
                raise WtError(f"PR #{pr.number} was closed without merging")

            if self.worktree_service.get_current_branch(self.repo_info.root) == pr.branch:
                self.emit_cd(self.repo_info.root, pr.branch)
                return
            existing = next(
                (wt for wt in self.worktree_service.list_worktrees() if wt.branch == pr.branch),
                None,
            )
            if existing:
                self.emit_cd(existing.path, existing.name)
                return
            self._checkout_and_enter(f"{self.config.remote_name}/{pr.branch}")
            return

        with Spinner(f"Looking up issue #{parsed.number}...", console=console):
            issue = self.github_service.get_issue_info(parsed.owner, parsed.repo, parsed.number)
        self._create_and_enter(f"{slugify(issue.title)}-{issue.number}")

    def _find_by_path(self, worktrees: List[Worktree], path: str) -> Optional[Worktree]:
        return next((wt for wt in worktrees if wt.path == path), None)

    def _remove(self, worktree: Worktree, cwd: str) -> bool:
        """Remove a worktree; cd back to the main checkout if we were inside it.

        Returns:
            True if the caller's cwd was inside the removed worktree
        """
        success, error = self.worktree_service.remove_worktree(worktree.path)
        if not success:
            raise GitOperationError("worktree remove", worktree.name, error)
        console.print(f"Removed {escape(worktree.name)}")
        if contains_path(worktree.path, cwd):
            self.emit_cd(self.repo_info.root, self.repo_info.name)
            return True
        return False

    def remove(self, name: Optional[str], yes: bool = False, cwd: Optional[str] = None) -> None:
        """Remove a worktree by name, or pick one interactively."""
        cwd = cwd or os.getcwd()
        worktrees = self.worktree_service.list_worktrees()

        if name:
            worktree = find_worktree(worktrees, name)
            if worktree is None:
                raise WorktreeNotFoundError(name)
            if worktree.is_main:
                raise WtError("cannot delete main repo")
            if not yes and not confirm(self.terminal, f"Remove {worktree.name}?"):
                return
        else:
            worktree = delete_picker(
                self.terminal,
                self.repo_info.name,
                worktrees,
                current_path=cwd,
                max_rows=self.config.max_visible_rows,
            )
            if worktree is None:
                return

        self._remove(worktree, cwd)

    def list_worktrees(self) -> None:
        """Print `name (branch)` for every worktree on stderr."""
        for worktree in self.worktree_service.list_worktrees():
            console.print(format_worktree_line(worktree), markup=False, highlight=False)

    def interactive(self, query: str = "", cwd: Optional[str] = None) -> None:
        """Run the picker until something is opened, created or it is cancelled.

        Deleting a worktree, or a name that cannot be used, re-opens the picker.
        """
        cwd = cwd or os.getcwd()
        worktrees = self.worktree_service.list_worktrees()

        while True:
            current = next(
                (wt for wt in worktrees if not wt.is_main and contains_path(wt.path, cwd)),
                None,
            )
            seed = query or (current.name if current else "")
            result = picker(
                self.terminal,
                self.repo_info.name,
                worktrees,
                seed,
                max_rows=self.config.max_visible_rows,
            )

            if isinstance(result, Select):
                selected = self._find_by_path(worktrees, result.path)
                self.emit_cd(result.path, selected.name if selected else self.repo_info.name)
                return

            if isinstance(result, Create):
                try:
                    branch = ensure_valid_branch_name(slugify(result.name))
                except (NameDerivationError, InvalidBranchNameError) as e:
                    console.print(f"[red]{escape(str(e))}[/red]")
                    continue
                self._create_and_enter(branch)
                return

            if isinstance(result, Delete):
                worktree = self._find_by_path(worktrees, result.path)
                if worktree and not worktree.is_main and confirm(self.terminal, f"Delete {worktree.name}?"):
                    if self._remove(worktree, cwd):
                        return
                    worktrees = self.worktree_service.list_worktrees()
                continue

            logger.debug("Picker cancelled")
            return
