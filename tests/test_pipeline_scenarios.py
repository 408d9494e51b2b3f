"""
End-to-end reconciliation runs against the in-memory gateway.
"""

import pytest

from conftest import OWNER, REPO, ScriptedGenerator
from docsync.components.matching import DOCS_PR_MARKER
from docsync.config import DocConfig
from docsync.exceptions import ContentQualityError, MissingCredentialError, RemoteOperationError
from docsync.gateway.base import ChangedFile
from docsync.orchestrator.plan import OriginatingChange, build_pr_body, build_reconciliation_plan
from docsync.orchestrator.runner import run_reconciliation_pipeline

CHANGE = OriginatingChange(owner=OWNER, repo=REPO, number=42)


def _run(gateway, generator, **kwargs):
    return run_reconciliation_pipeline(CHANGE, gateway=gateway, generator=generator, doc_config=DocConfig(), **kwargs)


# Tests
def test_first_run_creates_branch_docs_and_pr(gateway, generator):
    result = _run(gateway, generator)

    assert result.branch == "docs/update-pr-42"
    assert result.pull_request_created is True
    assert result.files_written == ["docs/llm/openai.mdx", "mint.json"]

    branch_files = gateway.branches["docs/update-pr-42"]
    assert "```" in branch_files["docs/llm/openai.mdx"]
    assert "docs/llm/openai" in branch_files["mint.json"]
    assert "docs/llm/openai.mdx" not in gateway.branches["main"]

    pr = gateway.pulls[result.pull_request_number]
    assert pr["title"].startswith(DOCS_PR_MARKER)
    assert "#42" in pr["body"]
    assert pr["head"] == "docs/update-pr-42"
    assert pr["base"] == "main"
    assert gateway.labels[result.pull_request_number] == ["documentation"]

    assert gateway.counts["create_branch"] == 1
    assert gateway.counts["create_pull_request"] == 1
    assert gateway.comments == [(42, f"I've created a documentation update PR: #{result.pull_request_number}")]


def test_second_run_updates_same_pr(gateway, generator):
    """Running again for the same change reuses the branch and PR."""
    first = _run(gateway, generator)
    second = _run(gateway, generator)

    assert second.branch == first.branch
    assert second.pull_request_number == first.pull_request_number
    assert second.pull_request_created is False

    assert gateway.counts["create_branch"] == 1
    assert gateway.counts["create_pull_request"] == 1
    assert gateway.counts["update_pull_request"] == 1
    assert len(gateway.comments) == 1

    docs_prs = [pr for pr in gateway.pulls.values() if pr["title"].startswith(DOCS_PR_MARKER)]
    assert len(docs_prs) == 1


def test_second_run_passes_draft_to_generator(gateway, generator):
    _run(gateway, generator)
    first_draft = gateway.branches["docs/update-pr-42"]["docs/llm/openai.mdx"]

    _run(gateway, generator)

    doc_calls = [c for c in generator.calls if c["kind"] == "doc"]
    assert doc_calls[-1]["summary"].draft_content == first_draft


def test_existing_doc_is_updated_without_navigation(gateway, generator):
    result = _run(gateway, generator, changed_paths=["src/llm/anthropic.ts"])

    assert result.files_written == ["docs/llm/anthropic.mdx"]
    assert generator.calls[0]["prior_content"] == gateway.branches["main"]["docs/llm/anthropic.mdx"]
    assert all(c["kind"] == "doc" for c in generator.calls)
    assert "skipped" in " ".join(result.execution_log)


def test_changed_paths_default_to_pr_files_without_deletions(gateway, generator):
    gateway.changed_files[42].append(ChangedFile(path="src/llm/legacy.ts", status="removed"))
    result = _run(gateway, generator)

    assert "docs/llm/legacy.mdx" not in result.files_written


def test_no_documentable_changes_is_a_no_op(gateway, generator):
    result = _run(gateway, generator, changed_paths=["README.md", "package.json"])

    assert result.branch is None
    assert result.pull_request_number is None
    assert result.files_written == []
    assert gateway.counts["create_branch"] == 0
    assert generator.calls == []


def test_change_without_number(gateway, generator):
    change = OriginatingChange(owner=OWNER, repo=REPO)
    result = run_reconciliation_pipeline(
        change, changed_paths=["src/llm/openai.ts"], gateway=gateway, generator=generator, doc_config=DocConfig()
    )

    assert result.branch.startswith("docs/update-")
    assert result.pull_request_created is True
    assert gateway.comments == []
    assert gateway.counts["get_pull_request"] == 0


def test_quality_failure_aborts_before_pr(gateway):
    generator = ScriptedGenerator({"docs/llm/openai.mdx": "Too short."})

    with pytest.raises(ContentQualityError):
        _run(gateway, generator)

    assert gateway.counts["write_file"] == 0
    assert gateway.counts["create_pull_request"] == 0


def test_remote_failure_aborts_run(gateway, generator):
    gateway.fail_on("create_pull_request")

    with pytest.raises(RemoteOperationError):
        _run(gateway, generator)

    # committed content stays on the docs branch
    assert "docs/llm/openai.mdx" in gateway.branches["docs/update-pr-42"]


def test_rerun_after_aborted_run_converges(gateway, generator):
    """A branch left without a PR is picked up by the next run."""
    gateway.fail_on("create_pull_request")
    with pytest.raises(RemoteOperationError):
        _run(gateway, generator)

    gateway.failures.clear()
    result = _run(gateway, generator)

    assert result.branch == "docs/update-pr-42"
    assert result.pull_request_created is True
    assert gateway.counts["create_branch"] == 1
    assert len([pr for pr in gateway.pulls.values() if pr["title"].startswith(DOCS_PR_MARKER)]) == 1
    assert gateway.comments == [(42, f"I've created a documentation update PR: #{result.pull_request_number}")]


def test_missing_credentials_fail_before_remote_calls(gateway, monkeypatch):
    monkeypatch.setattr("docsync.config.Config.OPENAI_API_KEY", None)
    monkeypatch.setattr("docsync.config.Config.ANTHROPIC_API_KEY", None)

    with pytest.raises(MissingCredentialError):
        run_reconciliation_pipeline(CHANGE, gateway=gateway, doc_config=DocConfig())

    assert gateway.calls == []


def test_plan_shape():
    plan = build_reconciliation_plan(CHANGE, ["src/llm/openai.ts", "README.md"], DocConfig())
    assert [step.action_id for step in plan] == [
        "get_commit_info",
        "find_documentation",
        "get_branch",
        "write_documentation",
        "commit_change",
        "write_documentation",
        "commit_change",
        "manage_pr",
    ]
    assert plan[-2].label == "commit mint.json"


def test_pr_body_lists_files_once():
    body = build_pr_body(CHANGE, ["docs/a.mdx", "docs/a.mdx", "mint.json"])
    assert "#42" in body
    assert body.count("`docs/a.mdx`") == 1
