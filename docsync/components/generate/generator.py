"""
Content Generator - contract, quality gate and the LLM-backed implementation.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from docsync.components.generate.prompt import (
    NAVIGATION_SYSTEM_PROMPT,
    build_doc_system_prompt,
    build_doc_user_prompt,
    build_navigation_user_prompt,
)
from docsync.config import DocConfig, LLMOptions
from docsync.exceptions import ContentQualityError, DocSyncError, RemoteOperationError
from docsync.llm.llm_client import LLMClient
from docsync.utils.logger import get_logger

logger = get_logger(__name__, "ContentGenerator")

CODE_FENCE = "```"
_OUTER_FENCE = re.compile(r"^\s*```[\w-]*\s*\n(.*?)\n\s*```\s*$", re.DOTALL)


class ChangeSummary(BaseModel):
    """What changed and why, as handed to the generator."""
    model_config = ConfigDict(frozen=True)

    path: str
    code_changes: str = ""
    related_files: Tuple[str, ...] = ()
    update_type: str = "update"
    reason: Optional[str] = None
    draft_content: Optional[str] = None


def strip_outer_fence(content: str) -> str:
    match = _OUTER_FENCE.match(content)
    return match.group(1) if match else content


def validate_generated_content(content: str, kind: str, options: Optional[LLMOptions] = None) -> str:
    """
    Reject generated output that is not usable as-is.

    Docs must reach the minimum length, carry no placeholder marker and
    contain at least one fenced code example. Navigation output must be
    JSON (an enclosing code fence is stripped).

    Returns:
        The content to write

    Raises:
        ContentQualityError: If the content fails a check
    """
    options = options or LLMOptions()
    content = content or ""

    if kind == "navigation":
        cleaned = strip_outer_fence(content).strip()
        try:
            json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise ContentQualityError(f"Generated navigation is not valid JSON: {e}") from e
        return cleaned + "\n"

    if len(content) < options.min_content_length:
        raise ContentQualityError(
            f"Generated content is too short ({len(content)} < {options.min_content_length} chars). "
            "Please try again with more detail."
        )
    markers = [m for m in options.placeholder_markers if m in content]
    if markers:
        raise ContentQualityError(
            f"Generated content contains placeholder text ({', '.join(markers)}). "
            "Please try again with more detail."
        )
    if CODE_FENCE not in content:
        raise ContentQualityError(
            "Generated content has no code examples. Please try again with more detail."
        )
    return content


class ContentGenerator(ABC):
    """Capability interface to the text-generation service."""

    @abstractmethod
    def generate(
        self,
        kind: str,
        prior_content: Optional[str],
        change_summary: ChangeSummary,
        templates: List[str],
        doc_config: DocConfig,
        run_id: Optional[str] = None,
    ) -> str:
        """
        Generate the full content for one file.

        Raises:
            ContentQualityError: If the output fails validate_generated_content
            RemoteOperationError: If the generation service fails
        """
        pass


class LLMContentGenerator(ContentGenerator):
    """Generates docs and navigation through LLMClient."""

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self._clients: Dict[Tuple[str, float], LLMClient] = {}
        self._default_client = llm_client

    def _client_for(self, options: LLMOptions) -> LLMClient:
        if self._default_client is not None:
            return self._default_client
        key = (options.model, options.temperature)
        if key not in self._clients:
            self._clients[key] = LLMClient(model=options.model, temperature=options.temperature)
        return self._clients[key]

    def generate(
        self,
        kind: str,
        prior_content: Optional[str],
        change_summary: ChangeSummary,
        templates: List[str],
        doc_config: DocConfig,
        run_id: Optional[str] = None,
    ) -> str:
        options = doc_config.llm

        if kind == "navigation":
            system_prompt = NAVIGATION_SYSTEM_PROMPT
            user_prompt = build_navigation_user_prompt(
                prior_content,
                list(change_summary.related_files),
                change_summary.code_changes,
                change_summary.reason,
            )
        else:
            system_prompt = build_doc_system_prompt(options.style_guide, templates)
            user_prompt = build_doc_user_prompt(
                path=change_summary.path,
                prior_content=prior_content,
                draft_content=change_summary.draft_content,
                code_changes=change_summary.code_changes,
                related_files=list(change_summary.related_files),
                update_type=change_summary.update_type,
                reason=change_summary.reason,
            )

        try:
            client = self._client_for(options)
            raw = client.chat_completion(system_prompt, user_prompt, max_tokens=options.max_tokens)
        except DocSyncError:
            raise
        except Exception as e:
            raise RemoteOperationError(f"Content generation failed for {change_summary.path}: {e}") from e

        content = validate_generated_content(raw, kind, options)
        logger.debug(f"Generated {len(content)} chars for {change_summary.path} ({kind})", run_id=run_id)
        return content
