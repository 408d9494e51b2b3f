"""
Documentation Discovery - builds doc_info for a set of changed source paths.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, TypeVar

from docsync.components.base_action import ActionParams, BaseAction
from docsync.components.discover.paths import derive_doc_path
from docsync.components.matching import find_docs_pull_request
from docsync.config import DocConfig, config
from docsync.exceptions import DocSyncError
from docsync.gateway.base import RepositoryGateway
from docsync.orchestrator.state import (
    DocFile,
    DocInfo,
    DraftFile,
    ExistingPR,
    PipelineState,
    StateDelta,
)
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "Discovery")

T = TypeVar("T")
R = TypeVar("R")


class FindDocumentationParams(ActionParams):
    owner: str
    repo: str
    paths: List[str]
    pull_number: Optional[int] = None


class Discovery(BaseAction):
    """
    Finds existing documentation and any open documentation PR.

    Per-file reads run concurrently; a file that cannot be read is recorded
    as absent instead of failing discovery for the rest of the set.
    """

    action_id = "find_documentation"
    description = "Find existing documentation and PRs for given files/features"
    params_model = FindDocumentationParams

    def __init__(self, gateway: RepositoryGateway, max_workers: Optional[int] = None):
        self.gateway = gateway
        self.max_workers = max_workers or config.DISCOVERY_MAX_WORKERS

    def run(
        self,
        owner: str,
        repo: str,
        paths: Sequence[str],
        change_id: Optional[int] = None,
        doc_config: Optional[DocConfig] = None,
        run_id: Optional[str] = None,
    ) -> DocInfo:
        """
        Args:
            owner: Repository owner
            repo: Repository name
            paths: Changed source paths
            change_id: Originating change number, used to find a drafted docs PR
            doc_config: Match rules and stable branch (defaults to DocConfig())

        Returns:
            DocInfo with one entry per derived doc path, then the navigation file
        """
        doc_config = doc_config or DocConfig()
        rules = doc_config.match_rules

        existing_pr = self._find_existing_pr(owner, repo, change_id, run_id)

        doc_paths = list(dict.fromkeys(derive_doc_path(p, rules) for p in paths))
        doc_paths = [p for p in doc_paths if p != rules.navigation_path]

        docs = self._map(
            lambda p: self._read_doc(owner, repo, p, doc_config.stable_branch, "doc", run_id),
            doc_paths,
        )
        navigation = self._read_doc(
            owner, repo, rules.navigation_path, doc_config.stable_branch, "navigation", run_id
        )

        found = sum(1 for d in docs if d.content is not None)
        logger.info(
            f"Discovered {len(docs)} doc target(s), {found} already documented; "
            f"navigation {'present' if navigation.content is not None else 'missing'}",
            run_id=run_id,
        )
        return DocInfo(files=tuple(docs) + (navigation,), existing_pr=existing_pr)

    def _execute(self, state: PipelineState, params: FindDocumentationParams, run_id: Optional[str] = None) -> StateDelta:
        doc_info = self.run(
            owner=params.owner,
            repo=params.repo,
            paths=params.paths,
            change_id=params.pull_number,
            doc_config=state.config,
            run_id=run_id,
        )
        return StateDelta(doc_info=doc_info)

    def _find_existing_pr(
        self, owner: str, repo: str, change_id: Optional[int], run_id: Optional[str]
    ) -> Optional[ExistingPR]:
        docs_pr = find_docs_pull_request(self.gateway, owner, repo, change_id)
        if not docs_pr:
            return None

        changed = self.gateway.list_changed_files(owner, repo, docs_pr.number)
        drafts = self._map(
            lambda f: self._read_draft(owner, repo, f.path, docs_pr.head_ref, run_id),
            changed,
        )
        logger.debug(
            f"Existing docs PR #{docs_pr.number} drafts {len(drafts)} file(s)",
            run_id=run_id,
        )
        return ExistingPR(number=docs_pr.number, branch=docs_pr.head_ref, files=tuple(drafts))

    def _read_doc(
        self, owner: str, repo: str, path: str, ref: str, kind: str, run_id: Optional[str]
    ) -> DocFile:
        try:
            remote = self.gateway.read_file(owner, repo, path, ref)
        except DocSyncError as e:
            logger.warning(f"Could not read {path}@{ref}, treating as absent: {e}", run_id=run_id)
            remote = None

        if remote is None:
            return DocFile(path=path, content=None, kind=kind)
        return DocFile(path=path, content=remote.content, kind=kind, last_modified=remote.sha)

    def _read_draft(self, owner: str, repo: str, path: str, ref: str, run_id: Optional[str]) -> DraftFile:
        try:
            remote = self.gateway.read_file(owner, repo, path, ref)
        except DocSyncError as e:
            logger.warning(f"Could not get content for {path}: {e}", run_id=run_id)
            remote = None
        return DraftFile(path=path, content=remote.content if remote else "")

    def _map(self, fn: Callable[[T], R], items: Sequence[T]) -> List[R]:
        """Apply fn concurrently; results keep input order."""
        if not items:
            return []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(items))) as pool:
            return list(pool.map(fn, items))
