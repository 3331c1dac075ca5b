"""Tests for WorktreeService against real git repositories."""
import os
from pathlib import Path
from unittest.mock import patch

import git
import pytest

from wt.exceptions import GitOperationError, InvalidBranchNameError
from wt.services.git.worktrees import (
    WorktreeService,
    find_worktree,
    get_repo_info,
    parse_worktree_porcelain,
)


@pytest.fixture
def service(repo_info, config):
    return WorktreeService(repo_info, config)


class TestGetRepoInfo:
    """Test repository discovery."""

    def test_from_main_checkout(self, git_repo, config):
        info = get_repo_info(git_repo.working_dir, config)
        assert info.root == git_repo.working_dir
        assert info.name == "test_repo"
        assert info.wt_dir == os.path.join(config.worktree_base, "test_repo")

    def test_from_subdirectory(self, git_repo, config):
        sub = os.path.join(git_repo.working_dir, "src")
        os.makedirs(sub)
        assert get_repo_info(sub, config).root == git_repo.working_dir

    def test_from_linked_worktree(self, service, git_repo, config):
        result = service.create_worktree("linked")
        info = get_repo_info(result.path, config)
        assert info.root == git_repo.working_dir
        assert info.name == "test_repo"
        assert info.wt_dir == os.path.join(config.worktree_base, "test_repo")

    def test_outside_repository(self, temp_dir, config):
        plain = temp_dir / "plain"
        plain.mkdir()
        assert get_repo_info(str(plain), config) is None


class TestListWorktrees:
    """Test listing worktrees."""

    def test_only_main(self, service, git_repo):
        worktrees = service.list_worktrees()
        assert len(worktrees) == 1
        main = worktrees[0]
        assert main.name == "main"
        assert main.is_main
        assert main.branch == "main"
        assert main.path == git_repo.working_dir
        assert len(main.commit) == 7
        assert main.created_at is not None

    def test_main_first_then_created(self, service):
        service.create_worktree("first")
        service.create_worktree("second")
        worktrees = service.list_worktrees()
        assert worktrees[0].name == "main"
        assert sorted(wt.name for wt in worktrees[1:]) == ["first", "second"]
        assert all(wt.repo_name == "test_repo" for wt in worktrees)

    def test_worktrees_outside_wt_dir_skipped(self, service, git_repo, temp_dir):
        git_repo.git.worktree("add", "-b", "elsewhere", str(temp_dir / "elsewhere"))
        names = [wt.name for wt in service.list_worktrees()]
        assert names == ["main"]

    def test_git_failure_returns_empty(self, service):
        with patch.object(WorktreeService, "_get_repo") as mock_repo:
            mock_repo.return_value.git.worktree.side_effect = git.exc.GitCommandError(
                "worktree", 128, stderr="fatal: broken"
            )
            assert service.list_worktrees() == []


class TestCreateWorktree:
    """Test creating worktrees."""

    def test_creates_branch_from_origin_main(self, service, git_repo, repo_info):
        result = service.create_worktree("feature-x")

        assert result.path == os.path.join(repo_info.wt_dir, "feature-x")
        assert result.branch == "feature-x"
        assert result.source_dir == git_repo.working_dir
        assert os.path.isfile(os.path.join(result.path, "README.md"))
        assert "feature-x" in [head.name for head in git_repo.heads]

    def test_slash_names_nest_directories(self, service, repo_info):
        result = service.create_worktree("feature/nested")
        assert result.path == os.path.join(repo_info.wt_dir, "feature", "nested")
        assert os.path.isdir(result.path)

    def test_existing_path_fails(self, service):
        service.create_worktree("dup")
        with pytest.raises(GitOperationError) as exc_info:
            service.create_worktree("dup")
        assert "already exists" in str(exc_info.value)

    def test_invalid_name_fails_before_git(self, service, repo_info):
        with pytest.raises(InvalidBranchNameError):
            service.create_worktree("bad name")
        assert not os.path.exists(os.path.join(repo_info.wt_dir, "bad name"))

    def test_existing_branch_fails(self, service, git_repo):
        git_repo.git.branch("taken")
        with pytest.raises(GitOperationError):
            service.create_worktree("taken")


class TestResolveBaseBranch:
    def test_prefers_remote(self, service):
        assert service.resolve_base_branch() == "origin/main"

    def test_local_fallback_without_remote(self, repo_info, config):
        config.remote_name = "nowhere"
        assert WorktreeService(repo_info, config).resolve_base_branch() == "main"

    def test_head_fallback(self, repo_info, config):
        config.remote_name = "nowhere"
        config.main_branches = ["trunk"]
        assert WorktreeService(repo_info, config).resolve_base_branch() == "HEAD"


class TestCheckoutWorktree:
    """Test checking out existing branches."""

    def test_remote_branch(self, service, git_repo, repo_info):
        git_repo.git.branch("feature/remote")
        git_repo.git.push("origin", "feature/remote")
        git_repo.git.branch("-D", "feature/remote")

        result = service.checkout_worktree("origin/feature/remote")

        assert result.branch == "feature/remote"
        assert result.path == os.path.join(repo_info.wt_dir, "feature-remote")
        assert service.get_current_branch(result.path) == "feature/remote"

    def test_local_branch_reused(self, service, git_repo):
        git_repo.git.branch("local-only")
        result = service.checkout_worktree("local-only")
        assert service.get_current_branch(result.path) == "local-only"

    def test_missing_branch(self, service):
        with pytest.raises(GitOperationError):
            service.checkout_worktree("origin/does-not-exist")

    def test_strip_ref_prefix(self, service):
        assert service.strip_ref_prefix("origin/feature/a") == "feature/a"
        assert service.strip_ref_prefix("refs/heads/fix") == "fix"
        assert service.strip_ref_prefix("plain") == "plain"


class TestRemoveWorktree:
    def test_remove(self, service):
        result = service.create_worktree("doomed")
        (Path(result.path) / "dirty.txt").write_text("uncommitted\n")

        success, error = service.remove_worktree(result.path)

        assert success is True
        assert error is None
        assert not os.path.exists(result.path)
        assert [wt.name for wt in service.list_worktrees()] == ["main"]

    def test_remove_unknown_path(self, service, temp_dir):
        success, error = service.remove_worktree(str(temp_dir / "nope"))
        assert success is False
        assert "git worktree remove failed" in error


class TestCurrentBranch:
    def test_main_checkout(self, service):
        assert service.get_current_branch() == "main"

    def test_detached(self, service, git_repo):
        git_repo.git.checkout("--detach")
        assert service.get_current_branch() is None

    def test_main_repo_path(self, service, git_repo):
        assert service.get_main_repo_path() == git_repo.working_dir


class TestParseWorktreePorcelain:
    """Test porcelain output parsing."""

    def test_parse(self):
        output = (
            "worktree /repos/app\n"
            "HEAD 1111111111111111111111111111111111111111\n"
            "branch refs/heads/main\n"
            "\n"
            "worktree /wt/app/fix\n"
            "HEAD 2222222222222222222222222222222222222222\n"
            "branch refs/heads/fix/crash\n"
            "\n"
            "worktree /wt/app/detached\n"
            "HEAD 3333333333333333333333333333333333333333\n"
            "detached"
        )
        entries = parse_worktree_porcelain(output)

        assert [e["path"] for e in entries] == ["/repos/app", "/wt/app/fix", "/wt/app/detached"]
        assert [e["is_main"] for e in entries] == [True, False, False]
        assert entries[1]["branch"] == "fix/crash"
        assert entries[2]["branch"] == "(detached)"

    def test_bare(self):
        entries = parse_worktree_porcelain("worktree /repos/app.git\nbare\n\n")
        assert entries == [{"path": "/repos/app.git", "is_main": True, "bare": True}]

    def test_empty(self):
        assert parse_worktree_porcelain("") == []


class TestFindWorktree:
    def test_exact_before_substring(self, make_worktree):
        worktrees = [make_worktree("auth-v2"), make_worktree("auth")]
        assert find_worktree(worktrees, "auth").name == "auth"

    def test_substring(self, make_worktree):
        worktrees = [make_worktree("main"), make_worktree("feature-login")]
        assert find_worktree(worktrees, "login").name == "feature-login"

    def test_missing(self, make_worktree):
        assert find_worktree([make_worktree("main")], "nope") is None
