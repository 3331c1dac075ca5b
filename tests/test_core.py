"""Tests for WorktreeManager command orchestration."""
import io
from unittest.mock import Mock, patch

import pytest

from fakes import DOWN, ENTER, ESCAPE, FakeTerminal, text_keys
from wt.config import Config
from wt.core import WorktreeManager
from wt.exceptions import GitOperationError, WorktreeNotFoundError, WtError
from wt.models.github import IssueInfo, PullRequestInfo, PullRequestState
from wt.models.worktree import CreateResult
from wt.services.git.worktrees import WorktreeService
from wt.services.github_service import GitHubService


@pytest.fixture
def mock_service(sample_worktrees):
    service = Mock(spec=WorktreeService)
    service.list_worktrees.return_value = list(sample_worktrees)
    service.get_main_repo_path.return_value = "/repos/test"
    service.get_current_branch.return_value = "main"
    service.remove_worktree.return_value = (True, None)
    service.create_worktree.side_effect = lambda name: CreateResult(
        path=f"/wt/test/{name}", source_dir="/repos/test", branch=name
    )
    service.checkout_worktree.side_effect = lambda ref: CreateResult(
        path=f"/wt/test/{ref.split('/')[-1]}", source_dir="/repos/test", branch=ref.split("/", 1)[-1]
    )
    return service


@pytest.fixture
def mock_github():
    return Mock(spec=GitHubService)


@pytest.fixture
def make_manager(fake_repo_info, mock_service, mock_github):
    """Build a manager around a scripted terminal; stdout goes to a buffer."""
    def _make(script=(), config=None):
        terminal = FakeTerminal(script)
        manager = WorktreeManager(
            fake_repo_info,
            config or Config(worktree_base="/wt", install_dependencies=False),
            terminal,
            out=io.StringIO(),
            worktree_service=mock_service,
            github_service=mock_github,
        )
        return manager
    return _make


@pytest.fixture(autouse=True)
def no_post_create():
    with patch("wt.core.post_create_setup") as mock_setup:
        yield mock_setup


def cd_lines(manager):
    return manager.out.getvalue().splitlines()


class TestSimpleCommands:
    """Test commands that do not prompt."""

    def test_main(self, make_manager):
        manager = make_manager()
        manager.run(["main"], cwd="/anywhere")
        assert cd_lines(manager) == ['echo -ne "\\033]0;test\\007"; cd "/repos/test"']

    def test_list(self, make_manager, capsys):
        manager = make_manager()
        manager.run(["list"], cwd="/anywhere")
        err = capsys.readouterr().err.splitlines()
        assert err == [
            "main (main)",
            "feature-login (feature-login)",
            "feature-auth (feature-auth)",
            "bugfix-header (bugfix-header)",
        ]
        assert cd_lines(manager) == []

    def test_new(self, make_manager, mock_service, no_post_create):
        manager = make_manager()
        manager.run(["new", "Add", "dark", "mode"], cwd="/anywhere")

        mock_service.create_worktree.assert_called_once_with("add-dark-mode")
        no_post_create.assert_called_once_with("/wt/test/add-dark-mode", "/repos/test", manager.config)
        assert cd_lines(manager)[-1].endswith('cd "/wt/test/add-dark-mode"')

    def test_new_without_name(self, make_manager):
        with pytest.raises(WtError, match="usage: wt new"):
            make_manager().run(["new"], cwd="/anywhere")

    def test_checkout(self, make_manager, mock_service):
        manager = make_manager()
        manager.run(["checkout", "origin/feat"], cwd="/anywhere")
        mock_service.checkout_worktree.assert_called_once_with("origin/feat")
        assert cd_lines(manager)[-1].endswith('cd "/wt/test/feat"')

    def test_checkout_without_branch(self, make_manager):
        with pytest.raises(WtError, match="usage: wt checkout"):
            make_manager().run(["checkout"], cwd="/anywhere")


class TestGithubUrls:
    """Test creating worktrees from issue and PR URLs."""

    def test_issue(self, make_manager, mock_service, mock_github):
        mock_github.get_issue_info.return_value = IssueInfo(number=42, title="Add dark mode support")
        manager = make_manager()
        manager.run(["https://github.com/acme/widgets/issues/42"], cwd="/anywhere")

        mock_github.get_issue_info.assert_called_once_with("acme", "widgets", 42)
        mock_service.create_worktree.assert_called_once_with("add-dark-mode-support-42")

    def test_new_with_url(self, make_manager, mock_service, mock_github):
        mock_github.get_issue_info.return_value = IssueInfo(number=5, title="Crash on start")
        make_manager().run(["new", "https://github.com/acme/widgets/issues/5"], cwd="/anywhere")
        mock_service.create_worktree.assert_called_once_with("crash-on-start-5")

    def test_open_pr_checks_out_branch(self, make_manager, mock_service, mock_github):
        mock_github.get_pr_info.return_value = PullRequestInfo(
            number=7, branch="feature/dark", state=PullRequestState.OPEN
        )
        manager = make_manager()
        manager.run(["https://github.com/acme/widgets/pull/7"], cwd="/anywhere")
        mock_service.checkout_worktree.assert_called_once_with("origin/feature/dark")

    def test_pr_with_existing_worktree(self, make_manager, mock_service, mock_github):
        mock_github.get_pr_info.return_value = PullRequestInfo(
            number=7, branch="feature-auth", state=PullRequestState.OPEN
        )
        manager = make_manager()
        manager.run(["https://github.com/acme/widgets/pull/7"], cwd="/anywhere")

        mock_service.checkout_worktree.assert_not_called()
        assert cd_lines(manager)[-1].endswith('cd "/wt/test/feature-auth"')

    def test_pr_on_current_branch(self, make_manager, mock_service, mock_github):
        mock_github.get_pr_info.return_value = PullRequestInfo(
            number=7, branch="main", state=PullRequestState.OPEN
        )
        manager = make_manager()
        manager.run(["https://github.com/acme/widgets/pull/7"], cwd="/anywhere")
        assert cd_lines(manager)[-1].endswith('cd "/repos/test"')

    @pytest.mark.parametrize("state,message", [
        (PullRequestState.MERGED, "PR #7 was already merged"),
        (PullRequestState.CLOSED, "PR #7 was closed without merging"),
    ])
    def test_finished_pr(self, make_manager, mock_service, mock_github, state, message):
        mock_github.get_pr_info.return_value = PullRequestInfo(number=7, branch="x", state=state)
        with pytest.raises(WtError, match=message):
            make_manager().run(["https://github.com/acme/widgets/pull/7"], cwd="/anywhere")
        mock_service.checkout_worktree.assert_not_called()


class TestRemove:
    """Test `wt rm`."""

    def test_by_name_confirmed(self, make_manager, mock_service, capsys):
        manager = make_manager(text_keys("y"))
        manager.run(["rm", "login"], cwd="/anywhere")

        mock_service.remove_worktree.assert_called_once_with("/wt/test/feature-login")
        assert "Removed feature-login" in capsys.readouterr().err
        assert cd_lines(manager) == []

    def test_by_name_declined(self, make_manager, mock_service):
        make_manager(text_keys("n")).run(["rm", "login"], cwd="/anywhere")
        mock_service.remove_worktree.assert_not_called()

    def test_yes_skips_confirmation(self, make_manager, mock_service):
        manager = make_manager()
        manager.run(["rm", "feature-auth"], yes=True, cwd="/anywhere")
        mock_service.remove_worktree.assert_called_once_with("/wt/test/feature-auth")
        assert manager.terminal.raw_entries == 0

    def test_inside_removed_worktree_returns_to_main(self, make_manager):
        manager = make_manager()
        manager.run(["rm", "feature-auth"], yes=True, cwd="/wt/test/feature-auth/src")
        assert cd_lines(manager) == ['echo -ne "\\033]0;test\\007"; cd "/repos/test"']

    def test_main_cannot_be_removed(self, make_manager, mock_service):
        with pytest.raises(WtError, match="cannot delete main repo"):
            make_manager().run(["rm", "main"], yes=True, cwd="/anywhere")
        mock_service.remove_worktree.assert_not_called()

    def test_unknown_name(self, make_manager):
        with pytest.raises(WorktreeNotFoundError):
            make_manager().run(["rm", "nope"], yes=True, cwd="/anywhere")

    def test_git_failure(self, make_manager, mock_service):
        mock_service.remove_worktree.return_value = (False, "locked")
        with pytest.raises(GitOperationError, match="locked"):
            make_manager().run(["rm", "login"], yes=True, cwd="/anywhere")

    def test_picker(self, make_manager, mock_service):
        manager = make_manager([ENTER] + text_keys("y"))
        manager.run(["rm"], cwd="/anywhere")
        mock_service.remove_worktree.assert_called_once_with("/wt/test/feature-login")

    def test_picker_cancelled(self, make_manager, mock_service):
        make_manager([ESCAPE]).run(["rm"], cwd="/anywhere")
        mock_service.remove_worktree.assert_not_called()


class TestInteractive:
    """Test the picker loop."""

    def test_auto_select(self, make_manager):
        manager = make_manager()
        manager.run(["login"], cwd="/anywhere")
        assert cd_lines(manager) == ['echo -ne "\\033]0;feature-login\\007"; cd "/wt/test/feature-login"']

    def test_select_from_list(self, make_manager):
        manager = make_manager([DOWN, DOWN, ENTER, ENTER])
        manager.run([], cwd="/anywhere")
        assert cd_lines(manager)[-1].endswith('cd "/wt/test/feature-auth"')

    def test_create_from_query(self, make_manager, mock_service):
        manager = make_manager(text_keys("Payment Flow") + [ENTER])
        manager.run([], cwd="/anywhere")
        mock_service.create_worktree.assert_called_once_with("payment-flow")
        assert cd_lines(manager)[-1].endswith('cd "/wt/test/payment-flow"')

    def test_unusable_name_reopens_picker(self, make_manager, mock_service, capsys):
        manager = make_manager(text_keys("!!!") + [ENTER, ESCAPE])
        manager.run([], cwd="/anywhere")

        mock_service.create_worktree.assert_not_called()
        assert "cannot derive a name" in capsys.readouterr().err
        assert manager.terminal.raw_entries == 2

    def test_delete_then_continue(self, make_manager, mock_service):
        manager = make_manager(text_keys("header") + [ENTER, DOWN, ENTER] + text_keys("y") + [ESCAPE])
        manager.run([], cwd="/anywhere")

        mock_service.remove_worktree.assert_called_once_with("/wt/test/bugfix-header")
        assert mock_service.list_worktrees.call_count == 2
        assert cd_lines(manager) == []

    def test_delete_declined(self, make_manager, mock_service):
        manager = make_manager(text_keys("header") + [ENTER, DOWN, ENTER] + text_keys("n") + [ESCAPE])
        manager.run([], cwd="/anywhere")
        mock_service.remove_worktree.assert_not_called()

    def test_delete_current_worktree_returns_to_main(self, make_manager, mock_service):
        manager = make_manager([DOWN, ENTER, DOWN, ENTER] + text_keys("y"))
        manager.run(["feature"], cwd="/wt/test/feature-login")

        mock_service.remove_worktree.assert_called_once_with("/wt/test/feature-login")
        assert cd_lines(manager) == ['echo -ne "\\033]0;test\\007"; cd "/repos/test"']

    def test_seeded_with_current_worktree(self, make_manager):
        """Inside a worktree whose name matches only itself, it is picked directly."""
        manager = make_manager()
        manager.run([], cwd="/wt/test/bugfix-header")
        assert cd_lines(manager)[-1].endswith('cd "/wt/test/bugfix-header"')

    def test_cancel(self, make_manager, mock_service):
        manager = make_manager([ESCAPE])
        manager.run([], cwd="/anywhere")
        assert cd_lines(manager) == []
        mock_service.create_worktree.assert_not_called()


class TestClose:
    def test_close_closes_github(self, make_manager, mock_github):
        make_manager().close()
        mock_github.close.assert_called_once()

    def test_github_service_created_lazily(self, fake_repo_info, mock_service):
        manager = WorktreeManager(
            fake_repo_info, Config(worktree_base="/wt"), FakeTerminal(), out=io.StringIO(),
            worktree_service=mock_service,
        )
        manager.close()
        assert manager._github_service is None
        assert isinstance(manager.github_service, GitHubService)
