"""
Pipeline state: the record threaded through every action, the deltas actions
return, and the langgraph run state wrapped around it.
"""

from typing import Any, Dict, List, Literal, Optional, Tuple, TypedDict

from pydantic import BaseModel, ConfigDict, Field

from docsync.config import DocConfig
from docsync.exceptions import StateConflictError

DocKind = Literal["doc", "navigation"]
UpdateType = Literal["create", "update"]
ChangeType = Literal["added", "modified", "deleted"]


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class FileChange(_Record):
    path: str
    diff: str = ""
    change_type: ChangeType


class CommitInfo(_Record):
    """The originating change. Set once per run."""
    files: Tuple[FileChange, ...] = ()
    title: str = ""
    description: str = ""
    base_branch: str
    head_branch: str

    def diff_for(self, path: str) -> str:
        for change in self.files:
            if change.path == path:
                return change.diff
        return ""


class DocFile(_Record):
    path: str
    content: Optional[str] = None
    kind: DocKind = "doc"
    last_modified: Optional[str] = None


class DraftFile(_Record):
    path: str
    content: str = ""


class ExistingPR(_Record):
    """Snapshot of an open documentation PR and the files it already drafts."""
    number: int
    branch: str
    files: Tuple[DraftFile, ...] = ()


class DocInfo(_Record):
    files: Tuple[DocFile, ...] = ()
    existing_pr: Optional[ExistingPR] = None

    def find(self, path: str) -> Optional[DocFile]:
        return next((f for f in self.files if f.path == path), None)

    def draft_for(self, path: str) -> Optional[DraftFile]:
        if not self.existing_pr:
            return None
        return next((f for f in self.existing_pr.files if f.path == path), None)


class BranchInfo(_Record):
    name: str
    sha: str
    exists: bool = True


class GeneratedContent(_Record):
    path: str
    kind: DocKind
    content: str
    update_type: UpdateType = "update"


class PullRequestInfo(_Record):
    number: int
    created: bool


class StateDelta(_Record):
    """What an action hands back; absent (None) fields leave state untouched."""
    commit_info: Optional[CommitInfo] = None
    doc_info: Optional[DocInfo] = None
    branch_info: Optional[BranchInfo] = None
    generated_content: Optional[GeneratedContent] = None
    written_files: Optional[Tuple[str, ...]] = None
    pull_request: Optional[PullRequestInfo] = None


class PipelineState(_Record):
    """
    Immutable pipeline record. Fields only move from absent to present;
    merge() returns a new value and never mutates the receiver.
    """
    config: DocConfig = Field(default_factory=DocConfig)
    commit_info: Optional[CommitInfo] = None
    doc_info: Optional[DocInfo] = None
    branch_info: Optional[BranchInfo] = None
    generated_content: Optional[GeneratedContent] = None
    written_files: Tuple[str, ...] = ()
    pull_request: Optional[PullRequestInfo] = None

    def merge(self, delta: Optional[StateDelta]) -> "PipelineState":
        if delta is None:
            return self

        updates: Dict[str, Any] = {}
        for field_name in StateDelta.model_fields:
            value = getattr(delta, field_name)
            if value is None:
                continue
            if field_name == "commit_info" and self.commit_info is not None and value != self.commit_info:
                raise StateConflictError("commit_info is read-only once set")
            updates[field_name] = value

        if not updates:
            return self
        return self.model_copy(update=updates)


class RunState(TypedDict):
    """langgraph state for one orchestrated run"""

    run_id: str
    pipeline_state: PipelineState

    # Plan-based execution
    plan: List[Any]
    plan_index: int

    # Execution tracking
    completed_actions: List[str]
    execution_log: List[str]

    # Decision for the current step: "run", "skip" or "complete"
    next_action: str
    reasoning: str
