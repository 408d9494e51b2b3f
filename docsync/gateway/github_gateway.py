"""
GitHub implementation of the Remote Repository Gateway (PyGithub).
"""

from typing import Any, Dict, List, Optional

from github import Github, Auth
from github.GithubException import GithubException

from docsync.config import config
from docsync.exceptions import MissingCredentialError, RemoteOperationError
from docsync.gateway.base import (
    ChangedFile,
    PullRequestSummary,
    RemoteFile,
    RepositoryGateway,
)
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "GitHubGateway")


class GitHubGateway(RepositoryGateway):
    """
    Talks to the GitHub REST API through PyGithub.

    Every GithubException is re-raised as RemoteOperationError, except a 404
    on read_file or find_branch_tip, which means the file or branch does not
    exist at that ref.
    """

    def __init__(self, gh_token: Optional[str] = None):
        """
        Args:
            gh_token: GitHub token (defaults to config.GITHUB_TOKEN)

        Raises:
            MissingCredentialError: If no token is available
        """
        self.gh_token = gh_token or config.GITHUB_TOKEN
        if not self.gh_token:
            logger.error("GITHUB_TOKEN is required for GitHubGateway", run_id="INIT")
            raise MissingCredentialError("GITHUB_TOKEN is required for GitHubGateway")

        self.gh = Github(auth=Auth.Token(self.gh_token))
        self._repos: Dict[str, Any] = {}
        logger.debug("Initialised GitHubGateway with GitHub token", run_id="INIT")

    def _repo(self, owner: str, repo: str) -> Any:
        full_name = f"{owner}/{repo}"
        if full_name not in self._repos:
            try:
                self._repos[full_name] = self.gh.get_repo(full_name)
            except GithubException as e:
                raise RemoteOperationError(f"Cannot access repository {full_name}: {e}") from e
        return self._repos[full_name]

    def _call(self, description: str, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except GithubException as e:
            raise RemoteOperationError(f"Failed to {description}: {e}") from e

    def get_default_branch(self, owner: str, repo: str) -> str:
        return self._call("read default branch", lambda: self._repo(owner, repo).default_branch)

    def get_branch_tip(self, owner: str, repo: str, branch: str) -> str:
        ref = self._call(
            f"resolve branch {branch}",
            self._repo(owner, repo).get_git_ref,
            f"heads/{branch}",
        )
        return ref.object.sha

    def find_branch_tip(self, owner: str, repo: str, branch: str) -> Optional[str]:
        try:
            ref = self._repo(owner, repo).get_git_ref(f"heads/{branch}")
        except GithubException as e:
            if e.status == 404:
                return None
            raise RemoteOperationError(f"Failed to resolve branch {branch}: {e}") from e
        return ref.object.sha

    def create_branch(self, owner: str, repo: str, name: str, from_sha: str) -> None:
        self._call(
            f"create branch {name}",
            self._repo(owner, repo).create_git_ref,
            ref=f"refs/heads/{name}",
            sha=from_sha,
        )

    def read_file(self, owner: str, repo: str, path: str, ref: str) -> Optional[RemoteFile]:
        try:
            content_file = self._repo(owner, repo).get_contents(path, ref=ref)
        except GithubException as e:
            if e.status == 404:
                return None
            raise RemoteOperationError(f"Failed to read {path}@{ref}: {e}") from e

        if isinstance(content_file, list):
            raise RemoteOperationError(f"{path}@{ref} is a directory, not a file")

        return RemoteFile(
            path=path,
            content=content_file.decoded_content.decode("utf-8"),
            sha=content_file.sha,
        )

    def write_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str,
        prior_sha: Optional[str] = None,
    ) -> None:
        gh_repo = self._repo(owner, repo)
        if prior_sha:
            self._call(
                f"update {path} on {branch}",
                gh_repo.update_file,
                path=path,
                message=message,
                content=content,
                sha=prior_sha,
                branch=branch,
            )
        else:
            self._call(
                f"create {path} on {branch}",
                gh_repo.create_file,
                path=path,
                message=message,
                content=content,
                branch=branch,
            )

    def list_open_pull_requests(self, owner: str, repo: str) -> List[PullRequestSummary]:
        pulls = self._call(
            "list open pull requests",
            lambda: list(self._repo(owner, repo).get_pulls(state="open")),
        )
        return [self._summarise(pr) for pr in pulls]

    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequestSummary:
        pr = self._call(f"get pull request #{number}", self._repo(owner, repo).get_pull, number)
        return self._summarise(pr)

    def create_pull_request(
        self, owner: str, repo: str, title: str, body: str, head: str, base: str
    ) -> int:
        pr = self._call(
            f"create pull request {head} -> {base}",
            self._repo(owner, repo).create_pull,
            title=title,
            body=body,
            head=head,
            base=base,
        )
        return pr.number

    def update_pull_request(self, owner: str, repo: str, number: int, title: str, body: str) -> None:
        pr = self._call(f"get pull request #{number}", self._repo(owner, repo).get_pull, number)
        self._call(f"update pull request #{number}", pr.edit, title=title, body=body)

    def set_labels(self, owner: str, repo: str, issue_number: int, labels: List[str]) -> None:
        issue = self._call(f"get issue #{issue_number}", self._repo(owner, repo).get_issue, issue_number)
        self._call(f"set labels on #{issue_number}", issue.set_labels, *labels)

    def add_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None:
        issue = self._call(f"get issue #{issue_number}", self._repo(owner, repo).get_issue, issue_number)
        self._call(f"comment on #{issue_number}", issue.create_comment, body)

    def list_changed_files(self, owner: str, repo: str, pull_number: int) -> List[ChangedFile]:
        pr = self._call(f"get pull request #{pull_number}", self._repo(owner, repo).get_pull, pull_number)
        files = self._call(f"list files of #{pull_number}", lambda: list(pr.get_files()))
        return [
            ChangedFile(path=f.filename, patch=f.patch or "", status=f.status)
            for f in files
        ]

    @staticmethod
    def _summarise(pr: Any) -> PullRequestSummary:
        return PullRequestSummary(
            number=pr.number,
            title=pr.title or "",
            body=pr.body or "",
            head_ref=pr.head.ref,
            base_ref=pr.base.ref,
        )
