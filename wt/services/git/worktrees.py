"""Worktree operations service for wt."""

import git
import os
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List, Sequence

from wt.config import Config
from wt.exceptions import GitOperationError
from wt.logging_config import get_logger
from wt.models.worktree import CreateResult, MAIN_WORKTREE_NAME, RepoInfo, Worktree
from wt.naming import ensure_valid_branch_name
from wt.utils.paths import contains_path

logger = get_logger(__name__)

DETACHED_BRANCH = "(detached)"
SHORT_SHA_LENGTH = 7


def git_error_message(e: git.exc.GitCommandError, command: str) -> str:
    """Describe a failed git command from its exit status and stderr."""
    stderr = (e.stderr if hasattr(e, "stderr") and e.stderr else "").strip()
    status = e.status if hasattr(e, "status") else "unknown"
    if stderr:
        return f"{command} failed (exit {status}): {stderr}"
    return f"{command} failed with exit code {status}"


def get_repo_info(path: Optional[str] = None, config: Optional[Config] = None) -> Optional[RepoInfo]:
    """Locate the repository containing path.

    The main checkout is derived from the shared git directory, so the
    answer is the same from the main checkout and from any linked worktree.

    Args:
        path: Directory to start from (defaults to the cwd)
        config: Configuration providing the worktree base directory

    Returns:
        RepoInfo, or None when path is not inside a git repository
    """
    config = config or Config()
    try:
        repo = git.Repo(path or os.getcwd(), search_parent_directories=True)
        toplevel = repo.git.rev_parse("--show-toplevel")
        common_dir = repo.git.rev_parse("--git-common-dir")
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError, git.exc.GitCommandError) as e:
        logger.debug(f"Not in a git repository: {e}")
        return None

    if not os.path.isabs(common_dir):
        common_dir = os.path.join(repo.working_tree_dir or toplevel, common_dir)
    common_dir = os.path.normpath(common_dir)

    if os.path.basename(common_dir) == ".git":
        root = os.path.dirname(common_dir)
    else:
        root = toplevel

    name = os.path.basename(root)
    return RepoInfo(
        root=root,
        name=name,
        wt_dir=os.path.join(config.worktree_base, name),
    )


def parse_worktree_porcelain(output: str) -> List[Dict[str, Any]]:
    """Parse `git worktree list --porcelain` into one dict per worktree.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name
        (blank line between worktrees)

    The first entry is always the main working tree.
    """
    entries: List[Dict[str, Any]] = []
    current: Dict[str, Any] = {}

    for line in output.split("\n"):
        line = line.strip()

        if not line:
            if current.get("path"):
                entries.append(current)
            current = {}
            continue

        if line.startswith("worktree "):
            current["path"] = line.split(" ", 1)[1]
            current["is_main"] = not entries
        elif line.startswith("HEAD "):
            current["HEAD"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            branch_ref = line.split(" ", 1)[1]
            if branch_ref.startswith("refs/heads/"):
                branch_ref = branch_ref[len("refs/heads/"):]
            current["branch"] = branch_ref
        elif line == "detached":
            current["branch"] = DETACHED_BRANCH
        elif line == "bare":
            current["bare"] = True

    # Handle last entry if no trailing blank line
    if current.get("path"):
        entries.append(current)

    return entries


def find_worktree(worktrees: Sequence[Worktree], name: str) -> Optional[Worktree]:
    """Find a worktree by exact name, falling back to a substring match."""
    for wt in worktrees:
        if wt.name == name:
            return wt
    for wt in worktrees:
        if name in wt.name:
            return wt
    return None


def _creation_time(path: str) -> Optional[datetime]:
    try:
        st = os.stat(path)
    except OSError:
        return None
    timestamp = getattr(st, "st_birthtime", None) or st.st_mtime
    return datetime.fromtimestamp(timestamp, timezone.utc)


class WorktreeService:
    """Service for managing the worktrees of one repository."""

    def __init__(self, repo_info: RepoInfo, config: Optional[Config] = None):
        """Initialize the worktree service.

        Args:
            repo_info: Repository location and worktree directory
            config: Configuration (remote and base branch candidates)
        """
        self.repo_info = repo_info
        self.config = config or Config()

    def _get_repo(self) -> git.Repo:
        """Open the main checkout. GitPython repos are cheap to open."""
        return git.Repo(self.repo_info.root)

    def list_worktrees(self) -> List[Worktree]:
        """List the main checkout and the worktrees under the worktree directory.

        Returns:
            Main checkout first (named "main"), then the rest newest first;
            an empty list if git fails
        """
        try:
            output = self._get_repo().git.worktree("list", "--porcelain")
        except git.exc.GitCommandError as e:
            logger.warning(f"Could not list worktrees: {git_error_message(e, 'git worktree list')}")
            return []

        wt_dir = os.path.realpath(self.repo_info.wt_dir)
        main: Optional[Worktree] = None
        others: List[Worktree] = []

        for entry in parse_worktree_porcelain(output):
            if entry.get("bare"):
                continue
            path = entry["path"]
            commit = entry.get("HEAD", "")[:SHORT_SHA_LENGTH]
            branch = entry.get("branch", "")

            if entry.get("is_main"):
                main = Worktree(
                    path=path,
                    name=MAIN_WORKTREE_NAME,
                    branch=branch,
                    commit=commit,
                    repo_name=self.repo_info.name,
                    created_at=_creation_time(path),
                )
            elif contains_path(wt_dir, os.path.realpath(path)) and os.path.realpath(path) != wt_dir:
                others.append(Worktree(
                    path=path,
                    name=os.path.basename(path),
                    branch=branch,
                    commit=commit,
                    repo_name=self.repo_info.name,
                    created_at=_creation_time(path),
                ))
            else:
                logger.debug(f"Skipping worktree outside {wt_dir}: {path}")

        others.sort(key=lambda wt: wt.name)
        others.sort(
            key=lambda wt: wt.created_at.timestamp() if wt.created_at else float("-inf"),
            reverse=True,
        )

        worktrees = ([main] if main else []) + others
        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def _fetch(self, ref: str) -> bool:
        try:
            self._get_repo().git.fetch(self.config.remote_name, ref)
            return True
        except git.exc.GitCommandError as e:
            logger.debug(git_error_message(e, f"git fetch {self.config.remote_name} {ref}"))
            return False

    def _ref_exists(self, ref: str) -> bool:
        try:
            self._get_repo().git.rev_parse("--verify", "--quiet", ref)
            return True
        except git.exc.GitCommandError:
            return False

    def resolve_base_branch(self) -> str:
        """Pick the ref new worktrees start from.

        Fetches the first main branch candidate the remote has, then returns
        the first existing remote-tracking candidate. Repositories without
        a remote fall back to a local candidate, then to HEAD.
        """
        remote = self.config.remote_name
        for candidate in self.config.main_branches:
            if self._fetch(candidate):
                break

        for candidate in self.config.main_branches:
            if self._ref_exists(f"{remote}/{candidate}"):
                return f"{remote}/{candidate}"
        for candidate in self.config.main_branches:
            if self._ref_exists(f"refs/heads/{candidate}"):
                logger.debug(f"No {remote} branch found, using local {candidate}")
                return candidate
        return "HEAD"

    def _target_path(self, dir_name: str) -> str:
        path = os.path.join(self.repo_info.wt_dir, dir_name)
        if os.path.exists(path):
            raise GitOperationError("worktree add", dir_name, f"{path} already exists")
        os.makedirs(self.repo_info.wt_dir, exist_ok=True)
        return path

    def create_worktree(self, name: str) -> CreateResult:
        """Create a new branch and worktree from the main branch.

        Args:
            name: Branch name, also used as the directory name

        Raises:
            InvalidBranchNameError: If name is not a valid branch name
            GitOperationError: If the directory exists or git fails
        """
        ensure_valid_branch_name(name)
        wt_path = self._target_path(name)
        base = self.resolve_base_branch()

        try:
            self._get_repo().git.worktree("add", "-b", name, wt_path, base)
        except git.exc.GitCommandError as e:
            raise GitOperationError("worktree add", name, git_error_message(e, "git worktree add")) from e

        logger.info(f"Created worktree {name} at {wt_path} from {base}")
        return CreateResult(path=wt_path, source_dir=self.repo_info.root, branch=name)

    def strip_ref_prefix(self, ref: str) -> str:
        """Turn origin/foo or refs/heads/foo into foo."""
        for prefix in (f"{self.config.remote_name}/", "refs/heads/"):
            if ref.startswith(prefix):
                ref = ref[len(prefix):]
        return ref

    def checkout_worktree(self, remote_branch: str) -> CreateResult:
        """Create a worktree for an existing branch.

        A local branch is reused; otherwise the branch is fetched and a
        tracking branch is created from the remote.

        Raises:
            InvalidBranchNameError: If the branch name is invalid
            GitOperationError: If the directory exists or git fails
        """
        branch = ensure_valid_branch_name(self.strip_ref_prefix(remote_branch))
        wt_path = self._target_path(branch.replace("/", "-"))
        repo = self._get_repo()
        remote = self.config.remote_name

        try:
            if branch in [head.name for head in repo.heads]:
                repo.git.worktree("add", wt_path, branch)
            else:
                repo.git.fetch(remote, branch)
                repo.git.worktree("add", "--track", "-b", branch, wt_path, f"{remote}/{branch}")
        except git.exc.GitCommandError as e:
            raise GitOperationError("worktree checkout", branch, git_error_message(e, "git worktree add")) from e

        logger.info(f"Checked out {branch} at {wt_path}")
        return CreateResult(path=wt_path, source_dir=self.repo_info.root, branch=branch)

    def remove_worktree(self, path: str) -> tuple[bool, Optional[str]]:
        """Remove a worktree, even if it has local changes.

        Args:
            path: Path to the worktree directory

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        try:
            self._get_repo().git.worktree("remove", "--force", path)
            logger.info(f"Removed worktree at {path}")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = git_error_message(e, "git worktree remove")
            logger.error(f"Failed to remove worktree at {path}: {error_msg}")
            return False, error_msg

    def get_current_branch(self, path: Optional[str] = None) -> Optional[str]:
        """Branch checked out at path (default: main checkout); None if detached."""
        try:
            return git.Repo(path or self.repo_info.root).active_branch.name
        except TypeError:
            return None
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            logger.debug(f"Could not read current branch at {path}: {e}")
            return None

    def get_main_repo_path(self) -> str:
        return self.repo_info.root
