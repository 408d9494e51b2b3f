"""
Execution plans: ordered steps handed to the orchestrator, and the fixed
reconciliation plan used by the pipeline entry point.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict

from docsync.components.discover.paths import derive_doc_path, is_documentable
from docsync.components.matching import change_reference, docs_pr_title
from docsync.config import DocConfig
from docsync.exceptions import DependencyUnmetError
from docsync.orchestrator.state import PipelineState

ParamsSource = Union[Dict[str, Any], Callable[[PipelineState], Dict[str, Any]]]


@dataclass(frozen=True)
class PlanStep:
    """
    One planned action invocation.

    params may be a callable so a step can read values produced by earlier
    steps (e.g. commit_change reading generated_content). A step whose
    condition returns False is skipped.
    """

    action_id: str
    params: ParamsSource
    condition: Optional[Callable[[PipelineState], bool]] = None
    label: str = ""

    @property
    def name(self) -> str:
        return self.label or self.action_id

    def resolve_params(self, state: PipelineState) -> Dict[str, Any]:
        if callable(self.params):
            return self.params(state)
        return dict(self.params)

    def should_run(self, state: PipelineState) -> bool:
        return self.condition is None or bool(self.condition(state))


class OriginatingChange(BaseModel):
    """The source change documentation is being synced for."""
    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    number: Optional[int] = None


def documentable_paths(changed_paths: Sequence[str], doc_config: DocConfig) -> List[str]:
    """Changed source paths that map onto a doc, one per doc path, in input order."""
    rules = doc_config.match_rules
    seen = set()
    result = []
    for path in changed_paths:
        if not is_documentable(path, rules):
            continue
        doc_path = derive_doc_path(path, rules)
        if doc_path in seen:
            continue
        seen.add(doc_path)
        result.append(path)
    return result


def _write_doc_params(source_path: str, doc_path: str) -> Callable[[PipelineState], Dict[str, Any]]:
    def params(state: PipelineState) -> Dict[str, Any]:
        code_changes = state.commit_info.diff_for(source_path) if state.commit_info else ""
        return {
            "path": doc_path,
            "kind": "doc",
            "context": {
                "code_changes": code_changes,
                "related_files": [source_path],
                "reason": f"{source_path} changed",
            },
        }
    return params


def _commit_params(change: OriginatingChange, path: str) -> Callable[[PipelineState], Dict[str, Any]]:
    def params(state: PipelineState) -> Dict[str, Any]:
        generated = state.generated_content
        if generated is None or generated.path != path:
            raise DependencyUnmetError(f"No generated content for {path}. Run write_documentation first.")
        message = f"docs: update {path}"
        if change.number is not None:
            message += f" ({change_reference(change.number)})"
        return {
            "owner": change.owner,
            "repo": change.repo,
            "path": path,
            "content": generated.content,
            "message": message,
        }
    return params


def _navigation_params(doc_paths: List[str], nav_path: str) -> Callable[[PipelineState], Dict[str, Any]]:
    def params(state: PipelineState) -> Dict[str, Any]:
        commit_info = state.commit_info
        return {
            "path": nav_path,
            "kind": "navigation",
            "context": {
                "related_files": doc_paths,
                "code_changes": f"{commit_info.title}\n\n{commit_info.description}" if commit_info else "",
                "reason": "New documentation pages were added",
            },
        }
    return params


def _adds_new_pages(doc_paths: List[str]) -> Callable[[PipelineState], bool]:
    def condition(state: PipelineState) -> bool:
        if not state.doc_info:
            return False
        for path in doc_paths:
            doc = state.doc_info.find(path)
            if doc is None or doc.content is None:
                return True
        return False
    return condition


def build_pr_body(change: OriginatingChange, written_files: Sequence[str]) -> str:
    """PR description; it must reference the change so later runs find the PR."""
    body_parts = []
    if change.number is not None:
        body_parts.append(
            f"This PR updates documentation for the changes introduced in {change_reference(change.number)}.\n\n"
        )
    else:
        body_parts.append("This PR updates documentation for recent code changes.\n\n")

    if written_files:
        body_parts.append("### Files updated\n\n")
        for path in dict.fromkeys(written_files):
            body_parts.append(f"- `{path}`\n")

    body_parts.append("\n---\n*Auto-generated by docsync*")
    return "".join(body_parts)


def _manage_pr_params(
    change: OriginatingChange,
    labels: Sequence[str],
    base_branch: Optional[str],
) -> Callable[[PipelineState], Dict[str, Any]]:
    def params(state: PipelineState) -> Dict[str, Any]:
        subject = state.commit_info.title if state.commit_info else ""
        return {
            "owner": change.owner,
            "repo": change.repo,
            "title": docs_pr_title(change.number, subject),
            "body": build_pr_body(change, state.written_files),
            "base_branch": base_branch,
            "labels": list(labels),
            "original_pr_number": change.number,
        }
    return params


def build_reconciliation_plan(
    change: OriginatingChange,
    changed_paths: Sequence[str],
    doc_config: DocConfig,
    labels: Optional[Sequence[str]] = None,
    base_branch: Optional[str] = None,
) -> List[PlanStep]:
    """
    Fixed plan: commit info -> discovery -> branch -> (write, commit) per
    doc -> navigation when pages are new -> PR.
    """
    rules = doc_config.match_rules
    sources = documentable_paths(changed_paths, doc_config)
    doc_paths = [derive_doc_path(p, rules) for p in sources]
    base = {"owner": change.owner, "repo": change.repo}

    steps: List[PlanStep] = []
    if change.number is not None:
        steps.append(PlanStep("get_commit_info", {**base, "pull_number": change.number}))

    steps.append(PlanStep("find_documentation", {**base, "paths": sources, "pull_number": change.number}))
    steps.append(PlanStep("get_branch", {**base, "original_pr_number": change.number}))

    for source_path, doc_path in zip(sources, doc_paths):
        steps.append(PlanStep("write_documentation", _write_doc_params(source_path, doc_path), label=f"write {doc_path}"))
        steps.append(PlanStep("commit_change", _commit_params(change, doc_path), label=f"commit {doc_path}"))

    adds_pages = _adds_new_pages(doc_paths)
    steps.append(PlanStep(
        "write_documentation",
        _navigation_params(doc_paths, rules.navigation_path),
        condition=adds_pages,
        label=f"write {rules.navigation_path}",
    ))
    steps.append(PlanStep(
        "commit_change",
        _commit_params(change, rules.navigation_path),
        condition=adds_pages,
        label=f"commit {rules.navigation_path}",
    ))

    steps.append(PlanStep(
        "manage_pr",
        _manage_pr_params(change, labels if labels is not None else doc_config.labels, base_branch),
    ))
    return steps
