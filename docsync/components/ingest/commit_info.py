"""
Commit Info - reads the originating pull request and its changed files.
"""

from typing import Optional

from docsync.components.base_action import ActionParams, BaseAction
from docsync.gateway.base import RepositoryGateway
from docsync.orchestrator.state import CommitInfo, FileChange, PipelineState, StateDelta
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "CommitInfoReader")


def map_change_type(status: str) -> str:
    if status == "added":
        return "added"
    if status == "removed":
        return "deleted"
    return "modified"


class GetCommitInfoParams(ActionParams):
    owner: str
    repo: str
    pull_number: int


class CommitInfoReader(BaseAction):
    action_id = "get_commit_info"
    description = "Get information about changes in a PR or commit"
    params_model = GetCommitInfoParams

    def __init__(self, gateway: RepositoryGateway):
        self.gateway = gateway

    def run(self, owner: str, repo: str, pull_number: int, run_id: Optional[str] = None) -> CommitInfo:
        pr = self.gateway.get_pull_request(owner, repo, pull_number)
        files = self.gateway.list_changed_files(owner, repo, pull_number)

        commit_info = CommitInfo(
            files=tuple(
                FileChange(path=f.path, diff=f.patch or "", change_type=map_change_type(f.status))
                for f in files
            ),
            title=pr.title,
            description=pr.body or "",
            base_branch=pr.base_ref,
            head_branch=pr.head_ref,
        )
        logger.info(
            f"Read #{pull_number}: {len(commit_info.files)} changed file(s), {pr.head_ref} -> {pr.base_ref}",
            run_id=run_id,
        )
        return commit_info

    def _execute(self, state: PipelineState, params: GetCommitInfoParams, run_id: Optional[str] = None) -> StateDelta:
        return StateDelta(commit_info=self.run(params.owner, params.repo, params.pull_number, run_id=run_id))
