"""
Pipeline entry point: reconcile documentation for one originating change.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from docsync.components.generate.generator import ContentGenerator, LLMContentGenerator
from docsync.config import Config, DocConfig, load_doc_config
from docsync.exceptions import InvalidParametersError
from docsync.gateway.base import RepositoryGateway
from docsync.gateway.github_gateway import GitHubGateway
from docsync.orchestrator.orchestrator import Orchestrator
from docsync.orchestrator.plan import OriginatingChange, build_reconciliation_plan, documentable_paths
from docsync.orchestrator.registry import build_default_registry
from docsync.orchestrator.state import PipelineState
from docsync.utils.correlation import generate_run_id
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "ReconciliationPipeline")


@dataclass
class ReconciliationResult:
    run_id: str
    branch: Optional[str] = None
    pull_request_number: Optional[int] = None
    pull_request_created: bool = False
    files_written: List[str] = field(default_factory=list)
    execution_log: List[str] = field(default_factory=list)


def run_reconciliation_pipeline(
    change: OriginatingChange,
    changed_paths: Optional[Sequence[str]] = None,
    doc_config: Optional[DocConfig] = None,
    gateway: Optional[RepositoryGateway] = None,
    generator: Optional[ContentGenerator] = None,
    labels: Optional[Sequence[str]] = None,
    base_branch: Optional[str] = None,
    run_id: Optional[str] = None,
) -> ReconciliationResult:
    """
    Bring the documentation branch and PR for change up to date.

    Args:
        change: Originating change (owner, repo and optional PR number)
        changed_paths: Changed source paths; read from the change's PR when None
        doc_config: Config snapshot (defaults to load_doc_config())
        gateway: Repository gateway (defaults to GitHubGateway())
        generator: Content generator (defaults to LLMContentGenerator())
        labels: Labels for the docs PR (defaults to doc_config.labels)
        base_branch: Base for a new docs PR (defaults to the repository default)

    Returns:
        ReconciliationResult with the branch, PR number and files written

    Raises:
        MissingCredentialError: Before any remote call, if a credential is missing
        DocSyncError: Whatever aborted the run
    """
    run_id = run_id or generate_run_id()
    doc_config = doc_config or load_doc_config()

    Config.require_credentials(doc_config.llm.model, github=gateway is None, llm=generator is None)
    gateway = gateway or GitHubGateway()
    generator = generator or LLMContentGenerator()

    if changed_paths is None:
        if change.number is None:
            raise InvalidParametersError("changed_paths is required when the change has no number")
        changed_paths = [
            f.path
            for f in gateway.list_changed_files(change.owner, change.repo, change.number)
            if f.status != "removed"
        ]

    logger.info(
        f"Reconciling docs for {change.owner}/{change.repo}"
        f"{f' #{change.number}' if change.number is not None else ''}: {len(changed_paths)} changed path(s)",
        run_id=run_id,
    )

    if not documentable_paths(changed_paths, doc_config):
        logger.info("No documentable source changes, nothing to do", run_id=run_id)
        return ReconciliationResult(run_id=run_id)

    plan = build_reconciliation_plan(change, changed_paths, doc_config, labels=labels, base_branch=base_branch)
    orchestrator = Orchestrator(build_default_registry(gateway, generator))
    result = orchestrator.run(PipelineState(config=doc_config), plan, run_id=run_id)

    final = result.state
    pull_request = final.pull_request
    return ReconciliationResult(
        run_id=run_id,
        branch=final.branch_info.name if final.branch_info else None,
        pull_request_number=pull_request.number if pull_request else None,
        pull_request_created=pull_request.created if pull_request else False,
        files_written=list(final.written_files),
        execution_log=result.execution_log,
    )
