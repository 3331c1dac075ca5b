"""Setup run after a worktree is created: ignored files and dependencies."""

import git
import os
import shutil
import subprocess
from typing import List, Optional, Tuple, Union, TYPE_CHECKING

from rich.console import Console

from wt.constants import EXCLUDED_COPY_DIRS, LOCKFILE_INSTALLERS, PACKAGE_JSON_INSTALLER
from wt.logging_config import get_logger
from wt.ui.spinner import spinner

if TYPE_CHECKING:
    from wt.config import Config

console = Console(stderr=True)
logger = get_logger(__name__)


def post_create_setup(wt_path: str, source_dir: str, config: Union["Config", dict, None] = None) -> None:
    """Make a fresh worktree ready to use.

    Copies gitignored files (env files, local settings) from source_dir and
    runs the detected package manager's install.
    """
    config = config or {}
    if config.get("copy_ignored_files", True):
        copy_gitignored_files(source_dir, wt_path)
    if config.get("install_dependencies", True):
        installer = detect_package_manager(wt_path)
        if installer:
            run_install(wt_path, *installer)


def detect_package_manager(directory: str) -> Optional[Tuple[str, List[str]]]:
    """Find the package manager from lockfiles.

    Returns:
        (name, install command), or None when nothing needs installing
    """
    for lockfile, name, command in LOCKFILE_INSTALLERS:
        if os.path.isfile(os.path.join(directory, lockfile)):
            return name, command
    manifest, name, command = PACKAGE_JSON_INSTALLER
    if os.path.isfile(os.path.join(directory, manifest)):
        return name, command
    return None


def run_install(directory: str, name: str, command: List[str]) -> bool:
    """Run an install command under a spinner. Failure is reported, not raised."""
    status = spinner(f"Running {name} install...", console=console)
    try:
        proc = subprocess.run(
            command,
            cwd=directory,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError as e:
        logger.debug(f"Could not run {' '.join(command)}: {e}")
        status.stop(f"[yellow]Warning: {name} install failed[/yellow]")
        return False

    if proc.returncode != 0:
        logger.debug(f"{' '.join(command)} exited with {proc.returncode}")
        status.stop(f"[yellow]Warning: {name} install failed[/yellow]")
        return False
    status.stop()
    return True


def get_gitignored_files(directory: str) -> List[str]:
    """List ignored, untracked files, skipping build and dependency dirs."""
    try:
        output = git.Repo(directory).git.ls_files("--others", "--ignored", "--exclude-standard")
    except (git.exc.GitCommandError, git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
        logger.debug(f"Could not list ignored files in {directory}: {e}")
        return []

    files = []
    for rel_path in output.splitlines():
        rel_path = rel_path.strip()
        if not rel_path:
            continue
        if any(part in EXCLUDED_COPY_DIRS for part in rel_path.split("/")):
            continue
        files.append(rel_path)
    return files


def copy_gitignored_files(source: str, dest: str) -> int:
    """Copy gitignored files from source into dest.

    Returns:
        Number of files copied
    """
    copied = 0
    for rel_path in get_gitignored_files(source):
        src_file = os.path.join(source, rel_path)
        if not os.path.isfile(src_file):
            continue
        dest_file = os.path.join(dest, rel_path)
        try:
            os.makedirs(os.path.dirname(dest_file), exist_ok=True)
            shutil.copy2(src_file, dest_file)
            copied += 1
        except OSError as e:
            logger.warning(f"Could not copy {rel_path}: {e}")

    if copied > 0:
        console.print(f"Copied {copied} gitignored files")
    return copied
