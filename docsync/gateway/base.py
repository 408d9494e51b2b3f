"""
Remote Repository Gateway contract.

The core only talks to the git-hosting platform through this interface;
GitHubGateway is the production implementation.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class RemoteFile(BaseModel):
    """A file read from the remote at a given ref."""
    model_config = ConfigDict(frozen=True)

    path: str
    content: str
    sha: str


class PullRequestSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    body: str = ""
    head_ref: str
    base_ref: str


class ChangedFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    patch: str = ""
    status: str


class RepositoryGateway(ABC):
    """Capability interface to the git-hosting platform."""

    @abstractmethod
    def get_default_branch(self, owner: str, repo: str) -> str:
        pass

    @abstractmethod
    def get_branch_tip(self, owner: str, repo: str, branch: str) -> str:
        pass

    @abstractmethod
    def find_branch_tip(self, owner: str, repo: str, branch: str) -> Optional[str]:
        """Tip sha of branch, or None when the branch does not exist."""
        pass

    @abstractmethod
    def create_branch(self, owner: str, repo: str, name: str, from_sha: str) -> None:
        pass

    @abstractmethod
    def read_file(self, owner: str, repo: str, path: str, ref: str) -> Optional[RemoteFile]:
        """Return the file at ref, or None when it does not exist."""
        pass

    @abstractmethod
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
        """Create the file, or update it when prior_sha is given."""
        pass

    @abstractmethod
    def list_open_pull_requests(self, owner: str, repo: str) -> List[PullRequestSummary]:
        pass

    @abstractmethod
    def get_pull_request(self, owner: str, repo: str, number: int) -> PullRequestSummary:
        pass

    @abstractmethod
    def create_pull_request(
        self, owner: str, repo: str, title: str, body: str, head: str, base: str
    ) -> int:
        pass

    @abstractmethod
    def update_pull_request(self, owner: str, repo: str, number: int, title: str, body: str) -> None:
        pass

    @abstractmethod
    def set_labels(self, owner: str, repo: str, issue_number: int, labels: List[str]) -> None:
        """Replace the full label set on an issue or pull request."""
        pass

    @abstractmethod
    def add_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None:
        pass

    @abstractmethod
    def list_changed_files(self, owner: str, repo: str, pull_number: int) -> List[ChangedFile]:
        pass
