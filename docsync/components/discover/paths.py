"""
Source path -> documentation path mapping.
"""

from pathlib import PurePosixPath
from typing import Optional

from docsync.config import MatchRules


def derive_doc_path(source_path: str, rules: Optional[MatchRules] = None) -> str:
    """
    Map a source file onto its documentation file.

    The source root prefix is swapped for the docs root and the file
    extension for the documentation extension:
        src/foo/bar.ts -> docs/foo/bar.mdx
    """
    rules = rules or MatchRules()
    path = source_path
    if path.startswith(rules.source_root):
        path = rules.docs_root + path[len(rules.source_root):]
    return str(PurePosixPath(path).with_suffix(rules.doc_extension))


def is_documentable(source_path: str, rules: Optional[MatchRules] = None) -> bool:
    """True for files under the source root with a tracked source extension."""
    rules = rules or MatchRules()
    if not source_path.startswith(rules.source_root):
        return False
    return PurePosixPath(source_path).suffix in rules.source_extensions


def category_of(path: str) -> Optional[str]:
    """Immediate parent directory name (second-to-last path segment)."""
    parts = path.split("/")
    return parts[-2] if len(parts) >= 2 else None
