"""
Branch Reconciler - returns the single documentation branch for a change,
reusing the branch of an open documentation PR when one exists.
"""

import re
import time
from typing import Optional

from docsync.components.base_action import ActionParams, BaseAction
from docsync.components.matching import find_docs_pull_request
from docsync.gateway.base import RepositoryGateway
from docsync.orchestrator.state import BranchInfo, PipelineState, StateDelta
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "BranchReconciler")

_UNSAFE_REF_CHARS = re.compile(r"[\s~^:?*\[\]\\@{}]+")


def make_ref_safe(name: str) -> str:
    """
    Make a branch name safe as a git ref.

    Whitespace and characters git forbids in refs become hyphens inside each
    '/'-separated segment; empty segments are dropped.
    """
    segments = []
    for segment in name.split("/"):
        segment = _UNSAFE_REF_CHARS.sub("-", segment.strip()).strip("-.")
        segment = segment.replace("..", "-")
        if segment:
            segments.append(segment)
    return "/".join(segments)


def docs_branch_name(change_id: Optional[int]) -> str:
    if change_id is not None:
        return f"docs/update-pr-{change_id}"
    return f"docs/update-{int(time.time() * 1000)}"


class GetBranchParams(ActionParams):
    owner: str
    repo: str
    original_pr_number: Optional[int] = None


class BranchReconciler(BaseAction):
    """Get or create the documentation branch."""

    action_id = "get_branch"
    description = "Get or create a documentation PR branch"
    params_model = GetBranchParams

    def __init__(self, gateway: RepositoryGateway):
        self.gateway = gateway

    def run(
        self,
        owner: str,
        repo: str,
        change_id: Optional[int] = None,
        run_id: Optional[str] = None,
    ) -> BranchInfo:
        """
        Reconcile the documentation branch for (owner, repo, change_id).

        Returns:
            BranchInfo of the existing docs PR's head branch, of an existing
            docs/update-pr-<id> branch without a PR, or of a branch freshly
            created from the default branch tip

        Raises:
            RemoteOperationError: If any lookup or the branch creation fails
        """
        logger.debug("Checking for existing docs PR", run_id=run_id)
        existing = find_docs_pull_request(self.gateway, owner, repo, change_id)

        if existing:
            sha = self.gateway.get_branch_tip(owner, repo, existing.head_ref)
            logger.info(
                f"Reusing branch {existing.head_ref} of existing docs PR #{existing.number}",
                run_id=run_id,
            )
            return BranchInfo(name=existing.head_ref, sha=sha, exists=True)

        branch_name = make_ref_safe(docs_branch_name(change_id))

        # Left behind by a run that failed before its PR was opened
        if change_id is not None:
            leftover_sha = self.gateway.find_branch_tip(owner, repo, branch_name)
            if leftover_sha:
                logger.info(
                    f"Reusing branch {branch_name} ({leftover_sha[:7]}) that has no docs PR yet",
                    run_id=run_id,
                )
                return BranchInfo(name=branch_name, sha=leftover_sha, exists=True)

        base_branch = self.gateway.get_default_branch(owner, repo)
        sha = self.gateway.get_branch_tip(owner, repo, base_branch)

        self.gateway.create_branch(owner, repo, branch_name, sha)
        logger.info(f"Created branch {branch_name} from {base_branch} ({sha[:7]})", run_id=run_id)

        return BranchInfo(name=branch_name, sha=sha, exists=True)

    def _execute(self, state: PipelineState, params: GetBranchParams, run_id: Optional[str] = None) -> StateDelta:
        branch_info = self.run(
            owner=params.owner,
            repo=params.repo,
            change_id=params.original_pr_number,
            run_id=run_id,
        )
        return StateDelta(branch_info=branch_info)
