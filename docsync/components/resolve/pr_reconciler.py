"""
PR Reconciler - keeps exactly one documentation PR per originating change,
updating it in place on later runs instead of opening a duplicate.
"""

from typing import List, Optional

from docsync.components.base_action import ActionParams, BaseAction
from docsync.components.matching import find_docs_pull_request
from docsync.exceptions import DependencyUnmetError
from docsync.gateway.base import RepositoryGateway
from docsync.orchestrator.state import PipelineState, PullRequestInfo, StateDelta
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "PRReconciler")


class ManagePRParams(ActionParams):
    owner: str
    repo: str
    title: str
    body: str
    base_branch: Optional[str] = None
    labels: List[str] = []
    original_pr_number: Optional[int] = None


def cross_reference_comment(pr_number: int) -> str:
    return f"I've created a documentation update PR: #{pr_number}"


class PRReconciler(BaseAction):
    """Create or update the documentation PR."""

    action_id = "manage_pr"
    description = "Create or update a documentation PR"
    depends_on = frozenset({"get_branch", "commit_change"})
    params_model = ManagePRParams

    def __init__(self, gateway: RepositoryGateway):
        self.gateway = gateway

    def run(
        self,
        owner: str,
        repo: str,
        head_branch: str,
        title: str,
        body: str,
        base_branch: Optional[str] = None,
        labels: Optional[List[str]] = None,
        change_id: Optional[int] = None,
        run_id: Optional[str] = None,
    ) -> PullRequestInfo:
        """
        Update the matching docs PR, or open a new one from head_branch.

        Args:
            owner: Repository owner
            repo: Repository name
            head_branch: Reconciled documentation branch
            title: PR title (should start with the docs PR marker)
            body: PR body (should reference #change_id)
            base_branch: Target branch; defaults to the repository default
            labels: Labels to set on the PR
            change_id: Originating change number

        Returns:
            PullRequestInfo with created=False when an existing PR was updated

        Raises:
            RemoteOperationError: If any GitHub call fails
        """
        existing = find_docs_pull_request(self.gateway, owner, repo, change_id)

        if existing:
            logger.info(f"Updating existing docs PR #{existing.number}", run_id=run_id)
            self.gateway.update_pull_request(owner, repo, existing.number, title, body)
            if labels:
                logger.debug(f"Replacing labels on #{existing.number}: {labels}", run_id=run_id)
                self.gateway.set_labels(owner, repo, existing.number, list(labels))
            return PullRequestInfo(number=existing.number, created=False)

        if not base_branch:
            base_branch = self.gateway.get_default_branch(owner, repo)
            logger.debug(f"Using default branch: {base_branch}", run_id=run_id)

        number = self.gateway.create_pull_request(owner, repo, title, body, head_branch, base_branch)
        logger.info(f"Created docs PR #{number} ({head_branch} -> {base_branch})", run_id=run_id)

        if labels:
            self.gateway.set_labels(owner, repo, number, list(labels))

        if change_id is not None:
            self.gateway.add_comment(owner, repo, change_id, cross_reference_comment(number))
            logger.debug(f"Linked docs PR #{number} from #{change_id}", run_id=run_id)

        return PullRequestInfo(number=number, created=True)

    def _execute(self, state: PipelineState, params: ManagePRParams, run_id: Optional[str] = None) -> StateDelta:
        if not state.branch_info or not state.branch_info.exists:
            raise DependencyUnmetError("Branch info not found. Make sure get_branch is called first.")
        if not state.written_files:
            raise DependencyUnmetError("No documentation committed yet. Make sure commit_change runs first.")

        pull_request = self.run(
            owner=params.owner,
            repo=params.repo,
            head_branch=state.branch_info.name,
            title=params.title,
            body=params.body,
            base_branch=params.base_branch,
            labels=params.labels,
            change_id=params.original_pr_number,
            run_id=run_id,
        )
        return StateDelta(pull_request=pull_request)
