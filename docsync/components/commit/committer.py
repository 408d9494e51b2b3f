"""
Committer - writes one documentation file to the reconciled branch.
"""

from typing import Optional

from docsync.components.base_action import ActionParams, BaseAction
from docsync.exceptions import DependencyUnmetError
from docsync.gateway.base import RepositoryGateway
from docsync.orchestrator.state import PipelineState, StateDelta
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "Committer")


class CommitChangeParams(ActionParams):
    owner: str
    repo: str
    path: str
    content: str
    message: str


class Committer(BaseAction):
    """Commit a documentation change to GitHub."""

    action_id = "commit_change"
    description = "Commit a documentation change to GitHub"
    depends_on = frozenset({"get_branch"})
    params_model = CommitChangeParams

    def __init__(self, gateway: RepositoryGateway):
        self.gateway = gateway

    def run(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: str,
        run_id: Optional[str] = None,
    ) -> None:
        """
        Create or update path on branch.

        The current blob sha on the branch is looked up first so an existing
        file is updated rather than rejected as a conflicting create.
        """
        current = self.gateway.read_file(owner, repo, path, branch)
        prior_sha = current.sha if current else None

        self.gateway.write_file(owner, repo, path, content, message, branch, prior_sha)
        logger.info(
            f"{'Updated' if prior_sha else 'Created'} {path} on {branch}",
            run_id=run_id,
        )

    def _execute(self, state: PipelineState, params: CommitChangeParams, run_id: Optional[str] = None) -> StateDelta:
        if not state.branch_info or not state.branch_info.exists:
            raise DependencyUnmetError("Branch info not found. Make sure get_branch is called first.")

        self.run(
            owner=params.owner,
            repo=params.repo,
            path=params.path,
            content=params.content,
            message=params.message,
            branch=state.branch_info.name,
            run_id=run_id,
        )
        return StateDelta(written_files=state.written_files + (params.path,))
