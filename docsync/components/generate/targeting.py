"""
Template selection: which existing docs should steer the style of a new or
updated document.
"""

from typing import List, Optional, Sequence

from docsync.components.discover.paths import category_of
from docsync.orchestrator.state import DocInfo


def select_templates(
    path: str,
    doc_info: Optional[DocInfo],
    template_paths: Optional[Sequence[str]] = None,
) -> List[str]:
    """
    Return the contents of the documents to use as style templates.

    Explicit template paths win when any of them has content (in the order
    given). Otherwise every doc in the same category as path, excluding path
    itself, is used, ordered by path.
    """
    if not doc_info:
        return []

    if template_paths:
        by_path = {f.path: f for f in doc_info.files if f.content}
        explicit = [by_path[p].content for p in template_paths if p in by_path]
        if explicit:
            return explicit

    category = category_of(path)
    if category is None:
        return []

    similar = [
        f for f in doc_info.files
        if f.kind == "doc"
        and f.content
        and f.path != path
        and category_of(f.path) == category
    ]
    return [f.content for f in sorted(similar, key=lambda f: f.path)]
