from typing import List, Optional


DOC_SYSTEM_PROMPT = """You are a documentation expert. Write clear, complete reference documentation for the code described.

The documentation MUST include:
1. An overview of what the code does and why it exists
2. Setup or configuration notes where relevant
3. API documentation for every export
4. Practical code examples in fenced code blocks with language tags
5. Error handling and troubleshooting notes

MDX formatting rules:
- Start with frontmatter (---) containing title and description
- Use {/* */} for comments, never <!-- -->
- Leave a blank line before and after code blocks
- One blank line between sections; "## Heading", never "##Heading"

Do not use placeholder text or TODO comments.
Return ONLY the MDX content, starting with frontmatter (---)."""


NAVIGATION_SYSTEM_PROMPT = """You are a documentation expert maintaining the navigation file of a docs site.
Keep the existing structure where possible, group related pages together,
use clear group names, and keep overview pages first.

Return only the navigation file content as valid JSON."""


def build_doc_system_prompt(style_guide: Optional[str], templates: List[str]) -> str:
    parts = [DOC_SYSTEM_PROMPT]

    if style_guide:
        parts.append(f"Custom style guide:\n{style_guide}")

    if templates:
        examples = "\n".join(
            f"Example doc {i}:\n```mdx\n{doc}\n```" for i, doc in enumerate(templates, 1)
        )
        parts.append(
            "Follow the style, structure and formatting of these existing documents:\n"
            f"{examples}"
        )

    return "\n\n".join(parts)


def build_doc_user_prompt(
    path: str,
    prior_content: Optional[str],
    draft_content: Optional[str],
    code_changes: str,
    related_files: List[str],
    update_type: str,
    reason: Optional[str],
) -> str:
    sections = []
    if prior_content:
        sections.append(f"Current content:\n{prior_content}")
    if draft_content:
        sections.append(f"Content in existing documentation PR:\n{draft_content}")

    sections.append(f"Code changes to document:\n```\n{code_changes}\n```")

    if related_files:
        sections.append("Related files:\n" + "\n".join(related_files))

    if update_type == "create":
        task = f"Create new documentation at {path} following the style of similar files."
    else:
        task = f"Update the documentation at {path} to reflect the changes."
    sections.append(f"Task: {task}")
    sections.append(f"Reason: {reason or 'Documentation needs to be updated based on code changes'}")

    return "\n\n".join(sections)


def build_navigation_user_prompt(
    prior_content: Optional[str],
    doc_paths: List[str],
    code_changes: str,
    reason: Optional[str],
) -> str:
    return (
        f"Current navigation:\n{prior_content or '{}'}\n\n"
        "Files to add/update:\n" + "\n".join(doc_paths) + "\n\n"
        f"Context:\n{code_changes}\n\n"
        f"Reason for update:\n{reason or 'Documentation structure needs updating'}"
    )
