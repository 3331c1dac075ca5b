"""GitHub issue and pull request lookup"""
import re
from typing import Optional, TYPE_CHECKING, Union

from github import Auth, Github, GithubException

from wt.exceptions import GitHubAPIError
from wt.logging_config import get_logger
from wt.models.github import GithubUrl, GithubUrlKind, IssueInfo, PullRequestInfo, PullRequestState

if TYPE_CHECKING:
    from github.Repository import Repository
    from wt.config import Config

logger = get_logger(__name__)

GITHUB_URL_PATTERN = re.compile(r"github\.com/([^/]+)/([^/]+)/(issues|pull)/(\d+)")


def parse_github_url(url: str) -> Optional[GithubUrl]:
    """Parse an issue or pull request URL.

    Args:
        url: Text containing github.com/<owner>/<repo>/(issues|pull)/<number>

    Returns:
        GithubUrl, or None if url is not an issue or pull request URL
    """
    match = GITHUB_URL_PATTERN.search(url)
    if not match:
        return None
    owner, repo, kind, number = match.groups()
    return GithubUrl(
        kind=GithubUrlKind.PR if kind == "pull" else GithubUrlKind.ISSUE,
        owner=owner,
        repo=repo,
        number=int(number),
    )


def is_github_url(text: str) -> bool:
    return GITHUB_URL_PATTERN.search(text) is not None


class GitHubService:
    def __init__(self, config: Union["Config", dict]):
        """Initialize the service.

        A token (config or GITHUB_TOKEN) is optional; public repositories
        can be read anonymously within GitHub's lower rate limit.
        """
        self.config = config
        self.github_token = config.get("github_token")
        self._github: Optional[Github] = None

    @property
    def github(self) -> Github:
        if self._github is None:
            if self.github_token:
                self._github = Github(auth=Auth.Token(self.github_token))
            else:
                logger.debug("[GitHub] No token configured, using anonymous access")
                self._github = Github()
        return self._github

    def _get_repo(self, owner: str, repo: str) -> "Repository":
        return self.github.get_repo(f"{owner}/{repo}")

    def get_issue_info(self, owner: str, repo: str, number: int) -> IssueInfo:
        """Fetch an issue's title.

        Raises:
            GitHubAPIError: If the issue cannot be read
        """
        try:
            issue = self._get_repo(owner, repo).get_issue(number)
            logger.debug(f"[GitHub] Issue #{number}: {issue.title}")
            return IssueInfo(number=number, title=issue.title)
        except GithubException as e:
            raise GitHubAPIError("get_issue", f"{owner}/{repo}#{number}: {_describe(e)}") from e

    def get_pr_info(self, owner: str, repo: str, number: int) -> PullRequestInfo:
        """Fetch a pull request's head branch and state.

        Raises:
            GitHubAPIError: If the pull request cannot be read
        """
        try:
            pr = self._get_repo(owner, repo).get_pull(number)
            if pr.merged:
                state = PullRequestState.MERGED
            elif pr.state == "closed":
                state = PullRequestState.CLOSED
            else:
                state = PullRequestState.OPEN
            logger.debug(f"[GitHub] PR #{number}: {pr.head.ref} ({state.value})")
            return PullRequestInfo(number=number, branch=pr.head.ref, state=state)
        except GithubException as e:
            raise GitHubAPIError("get_pull", f"{owner}/{repo}#{number}: {_describe(e)}") from e

    def close(self) -> None:
        """Close the GitHub API connection to clean up resources."""
        if self._github:
            try:
                self._github.close()
                logger.debug("[GitHub] Closed GitHub API connection")
            except Exception as e:
                logger.debug(f"[GitHub] Error closing GitHub API connection: {e}")
            self._github = None


def _describe(e: GithubException) -> str:
    data = e.data if isinstance(e.data, dict) else {}
    message = data.get("message") or str(e)
    return f"{message} (HTTP {e.status})" if e.status else message
