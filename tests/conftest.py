"""Pytest fixtures for wt tests"""
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
import pytest
import git

from wt.config import Config
from wt.models.worktree import RepoInfo, Worktree
from wt.services.git.worktrees import get_repo_info


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def config(temp_dir):
    """Configuration that keeps worktrees inside the temporary directory."""
    return Config(
        worktree_base=str(temp_dir / "wt-base"),
        install_dependencies=False,
        github_token="test_token_for_testing",
    )


@pytest.fixture
def origin_repo(temp_dir):
    """A bare repository acting as the remote."""
    repo = git.Repo.init(temp_dir / "origin.git", bare=True)
    yield repo
    repo.close()


@pytest.fixture
def git_repo(temp_dir, origin_repo):
    """Create a real Git repository with a main branch pushed to origin."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    (repo_path / ".gitignore").write_text(".env\nnode_modules/\n")
    repo.index.add(["README.md", ".gitignore"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch("-M", "main")

    repo.create_remote("origin", str(temp_dir / "origin.git"))
    repo.git.push("origin", "main")

    yield repo

    repo.close()


@pytest.fixture
def repo_info(git_repo, config):
    """RepoInfo for the test repository."""
    return get_repo_info(git_repo.working_dir, config)


@pytest.fixture
def make_worktree():
    """Factory for Worktree records that do not need to exist on disk."""
    def _make(name, path=None, branch=None, created_at=None):
        return Worktree(
            path=path or f"/wt/test/{name}",
            name=name,
            branch=branch or name,
            commit="abc1234",
            repo_name="test",
            created_at=created_at,
        )
    return _make


@pytest.fixture
def sample_worktrees(make_worktree):
    """main plus three linked worktrees, in the order the lister returns them."""
    now = datetime.now(timezone.utc)
    return [
        make_worktree("main", path="/repos/test"),
        make_worktree("feature-login", created_at=now - timedelta(minutes=5)),
        make_worktree("feature-auth", created_at=now - timedelta(hours=3)),
        make_worktree("bugfix-header", created_at=now - timedelta(days=10)),
    ]


@pytest.fixture
def fake_repo_info():
    """RepoInfo for tests that never touch git."""
    return RepoInfo(root="/repos/test", name="test", wt_dir="/wt/test")
