"""
Doc Writer - generates the content of one documentation file.

Generation only; committing the result is the commit_change action's job.
"""

from pathlib import PurePosixPath
from typing import List, Literal, Optional

from docsync.components.base_action import ActionParams, BaseAction
from docsync.components.generate.generator import ChangeSummary, ContentGenerator
from docsync.components.generate.targeting import select_templates
from docsync.exceptions import InvalidParametersError
from docsync.orchestrator.state import GeneratedContent, PipelineState, StateDelta
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "DocWriter")


class WriteContext(ActionParams):
    related_files: List[str] = []
    code_changes: str = ""
    template_paths: List[str] = []
    update_type: Optional[Literal["create", "update"]] = None
    reason: Optional[str] = None


class WriteDocumentationParams(ActionParams):
    path: str
    kind: Literal["doc", "navigation"]
    context: WriteContext = WriteContext()


class DocWriter(BaseAction):
    action_id = "write_documentation"
    description = "Generate or update documentation content"
    depends_on = frozenset({"get_branch"})
    params_model = WriteDocumentationParams

    def __init__(self, generator: ContentGenerator):
        self.generator = generator

    def _execute(self, state: PipelineState, params: WriteDocumentationParams, run_id: Optional[str] = None) -> StateDelta:
        rules = state.config.match_rules
        ctx = params.context

        if params.kind == "doc":
            suffix = PurePosixPath(params.path).suffix
            if suffix not in rules.doc_extensions:
                raise InvalidParametersError(
                    f'Invalid file extension "{suffix}". '
                    f"Allowed extensions: {', '.join(rules.doc_extensions)}"
                )

        doc_info = state.doc_info
        existing = doc_info.find(params.path) if doc_info else None
        draft = doc_info.draft_for(params.path) if doc_info else None
        prior_content = existing.content if existing else None

        update_type = ctx.update_type or ("update" if prior_content is not None else "create")

        related_files = list(ctx.related_files)
        if params.kind == "navigation" and not related_files and doc_info:
            related_files = [f.path for f in doc_info.files if f.kind == "doc"]

        templates = []
        if params.kind == "doc":
            templates = select_templates(params.path, doc_info, ctx.template_paths)

        summary = ChangeSummary(
            path=params.path,
            code_changes=ctx.code_changes,
            related_files=tuple(related_files),
            update_type=update_type,
            reason=ctx.reason,
            draft_content=draft.content if draft and draft.content else None,
        )

        content = self.generator.generate(
            params.kind, prior_content, summary, templates, state.config, run_id=run_id
        )
        logger.info(
            f"Generated {params.kind} for {params.path} ({update_type}, {len(templates)} template(s))",
            run_id=run_id,
        )

        return StateDelta(
            generated_content=GeneratedContent(
                path=params.path,
                kind=params.kind,
                content=content,
                update_type=update_type,
            )
        )
