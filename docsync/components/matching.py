"""
Recognising this system's documentation pull requests.

Branch reconciliation, PR reconciliation and discovery all go through
find_docs_pull_request so their "already exists" answers never disagree.
"""

from typing import Iterable, Optional

from docsync.gateway.base import PullRequestSummary, RepositoryGateway

DOCS_PR_MARKER = "📚 Update documentation"


def change_reference(change_id: int) -> str:
    return f"#{change_id}"


def is_docs_pull_request(pr: PullRequestSummary, change_id: Optional[int]) -> bool:
    """Title starts with the marker and body mentions #<change_id>."""
    if change_id is None:
        return False
    return pr.title.startswith(DOCS_PR_MARKER) and change_reference(change_id) in (pr.body or "")


def match_docs_pull_request(
    pulls: Iterable[PullRequestSummary], change_id: Optional[int]
) -> Optional[PullRequestSummary]:
    return next((pr for pr in pulls if is_docs_pull_request(pr, change_id)), None)


def find_docs_pull_request(
    gateway: RepositoryGateway, owner: str, repo: str, change_id: Optional[int]
) -> Optional[PullRequestSummary]:
    """List open PRs and return the documentation PR for change_id, if any."""
    if change_id is None:
        return None
    return match_docs_pull_request(gateway.list_open_pull_requests(owner, repo), change_id)


def docs_pr_title(change_id: Optional[int], subject: str = "") -> str:
    title = DOCS_PR_MARKER
    if change_id is not None:
        title += f" for #{change_id}"
    if subject:
        title += f": {subject}"
    return title
