"""
Shared fixtures: an in-memory repository gateway and a scripted content
generator, so pipeline tests never touch GitHub or an LLM.
"""

import hashlib
import json
from collections import Counter
from typing import Dict, List, Optional, Tuple

import pytest

from docsync.components.generate.generator import (
    ChangeSummary,
    ContentGenerator,
    validate_generated_content,
)
from docsync.config import DocConfig
from docsync.exceptions import RemoteOperationError
from docsync.gateway.base import (
    ChangedFile,
    PullRequestSummary,
    RemoteFile,
    RepositoryGateway,
)

OWNER = "acme"
REPO = "widgets"


def _sha(content: str) -> str:
    return hashlib.sha1(content.encode("utf-8")).hexdigest()


class InMemoryGateway(RepositoryGateway):
    """
    Fake git host for a single repository.

    Branches hold their own file maps; every call is recorded in self.calls
    and counted in self.counts.
    """

    def __init__(self, default_branch: str = "main"):
        self.default_branch = default_branch
        self.branches: Dict[str, Dict[str, str]] = {default_branch: {}}
        self.tips: Dict[str, str] = {default_branch: _sha(default_branch)}
        self.pulls: Dict[int, dict] = {}
        self.changed_files: Dict[int, List[ChangedFile]] = {}
        self.branch_writes: Dict[str, List[Tuple[str, str]]] = {}
        self.comments: List[Tuple[int, str]] = []
        self.labels: Dict[int, List[str]] = {}
        self.failures: Dict[str, Exception] = {}
        self.calls: List[Tuple[str, tuple]] = []
        self.counts: Counter = Counter()
        self._next_number = 100

    # Seeding helpers

    def seed_file(self, path: str, content: str, branch: Optional[str] = None) -> None:
        self.branches[branch or self.default_branch][path] = content

    def seed_pull_request(
        self,
        number: int,
        title: str,
        body: str = "",
        head: str = "feature",
        base: Optional[str] = None,
        files: Optional[List[ChangedFile]] = None,
    ) -> None:
        self.pulls[number] = {
            "title": title,
            "body": body,
            "head": head,
            "base": base or self.default_branch,
            "state": "open",
        }
        if files is not None:
            self.changed_files[number] = list(files)
        self._next_number = max(self._next_number, number + 1)

    def fail_on(self, method: str, error: Optional[Exception] = None) -> None:
        self.failures[method] = error or RemoteOperationError(f"{method} failed")

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, args))
        self.counts[method] += 1
        if method in self.failures:
            raise self.failures[method]

    def _summary(self, number: int) -> PullRequestSummary:
        pr = self.pulls[number]
        return PullRequestSummary(
            number=number, title=pr["title"], body=pr["body"], head_ref=pr["head"], base_ref=pr["base"]
        )

    # RepositoryGateway

    def get_default_branch(self, owner, repo):
        self._record("get_default_branch", owner, repo)
        return self.default_branch

    def get_branch_tip(self, owner, repo, branch):
        self._record("get_branch_tip", owner, repo, branch)
        if branch not in self.tips:
            raise RemoteOperationError(f"Branch not found: {branch}")
        return self.tips[branch]

    def find_branch_tip(self, owner, repo, branch):
        self._record("find_branch_tip", owner, repo, branch)
        return self.tips.get(branch)

    def create_branch(self, owner, repo, name, from_sha):
        self._record("create_branch", owner, repo, name, from_sha)
        if name in self.branches:
            raise RemoteOperationError(f"Reference already exists: {name}")
        source = next((b for b, tip in self.tips.items() if tip == from_sha), self.default_branch)
        self.branches[name] = dict(self.branches[source])
        self.tips[name] = from_sha

    def read_file(self, owner, repo, path, ref):
        self._record("read_file", owner, repo, path, ref)
        files = self.branches.get(ref)
        if files is None:
            raise RemoteOperationError(f"No such ref: {ref}")
        if path not in files:
            return None
        return RemoteFile(path=path, content=files[path], sha=_sha(files[path]))

    def write_file(self, owner, repo, path, content, message, branch, prior_sha=None):
        self._record("write_file", owner, repo, path, content, message, branch, prior_sha)
        files = self.branches.get(branch)
        if files is None:
            raise RemoteOperationError(f"No such branch: {branch}")
        current = files.get(path)
        if current is not None and prior_sha != _sha(current):
            raise RemoteOperationError(f"sha mismatch writing {path}")
        if current is None and prior_sha is not None:
            raise RemoteOperationError(f"{path} does not exist on {branch}")
        files[path] = content
        self.tips[branch] = _sha(f"{branch}:{path}:{content}")
        self.branch_writes.setdefault(branch, []).append(
            (path, "modified" if current is not None else "added")
        )

    def list_open_pull_requests(self, owner, repo):
        self._record("list_open_pull_requests", owner, repo)
        return [self._summary(n) for n, pr in sorted(self.pulls.items()) if pr["state"] == "open"]

    def get_pull_request(self, owner, repo, number):
        self._record("get_pull_request", owner, repo, number)
        if number not in self.pulls:
            raise RemoteOperationError(f"Pull request #{number} not found")
        return self._summary(number)

    def create_pull_request(self, owner, repo, title, body, head, base):
        self._record("create_pull_request", owner, repo, title, body, head, base)
        number = self._next_number
        self._next_number += 1
        self.pulls[number] = {"title": title, "body": body, "head": head, "base": base, "state": "open"}
        return number

    def update_pull_request(self, owner, repo, number, title, body):
        self._record("update_pull_request", owner, repo, number, title, body)
        self.pulls[number].update(title=title, body=body)

    def set_labels(self, owner, repo, issue_number, labels):
        self._record("set_labels", owner, repo, issue_number, list(labels))
        self.labels[issue_number] = list(labels)

    def add_comment(self, owner, repo, issue_number, body):
        self._record("add_comment", owner, repo, issue_number, body)
        self.comments.append((issue_number, body))

    def list_changed_files(self, owner, repo, pull_number):
        self._record("list_changed_files", owner, repo, pull_number)
        if pull_number in self.changed_files:
            return list(self.changed_files[pull_number])
        pr = self.pulls.get(pull_number)
        if pr is None:
            raise RemoteOperationError(f"Pull request #{pull_number} not found")
        seen = {}
        for path, status in self.branch_writes.get(pr["head"], []):
            seen.setdefault(path, status)
        return [ChangedFile(path=path, status=status) for path, status in seen.items()]


def sample_doc(title: str) -> str:
    return (
        f"---\ntitle: {title}\ndescription: Reference for {title}\n---\n\n"
        f"## Overview\n\n{title} wraps the provider SDK behind a small, typed interface "
        "so callers can swap models without touching call sites.\n\n"
        "## Usage\n\n"
        "```ts\n"
        f"import {{ create }} from './{title.lower()}';\n\n"
        "const client = create({ model: 'default' });\n"
        "const reply = await client.complete('hello');\n"
        "```\n\n"
        "## Errors\n\nCalls reject with a descriptive error when the provider is unreachable.\n"
    )


class ScriptedGenerator(ContentGenerator):
    """
    Deterministic generator. Output still goes through the quality gate so
    scripted bad responses are rejected the same way LLM output would be.
    """

    def __init__(self, responses: Optional[Dict[str, str]] = None):
        self.responses = dict(responses or {})
        self.calls: List[dict] = []

    def generate(self, kind, prior_content, change_summary: ChangeSummary, templates, doc_config: DocConfig, run_id=None):
        self.calls.append({
            "kind": kind,
            "prior_content": prior_content,
            "summary": change_summary,
            "templates": list(templates),
            "run_id": run_id,
        })
        if change_summary.path in self.responses:
            raw = self.responses[change_summary.path]
        elif kind == "navigation":
            pages = [p.rsplit(".", 1)[0] for p in change_summary.related_files]
            raw = json.dumps({"navigation": [{"group": "Reference", "pages": pages}]}, indent=2)
        else:
            name = change_summary.path.rsplit("/", 1)[-1].rsplit(".", 1)[0]
            raw = sample_doc(name.capitalize())
        return validate_generated_content(raw, kind, doc_config.llm)


# Fixtures

@pytest.fixture
def doc_config():
    return DocConfig()


@pytest.fixture
def gateway():
    """Repository with one documented module, a nav file and open PR #42."""
    gw = InMemoryGateway()
    gw.seed_file("src/llm/anthropic.ts", "export const anthropic = () => {};\n")
    gw.seed_file("src/llm/openai.ts", "export const openai = () => {};\n")
    gw.seed_file("docs/llm/anthropic.mdx", sample_doc("Anthropic"))
    gw.seed_file("mint.json", json.dumps({"navigation": [{"group": "Reference", "pages": ["docs/llm/anthropic"]}]}))
    gw.seed_pull_request(
        42,
        title="Add OpenAI provider",
        body="Adds the OpenAI provider.",
        head="feature/openai",
        files=[
            ChangedFile(path="src/llm/openai.ts", patch="+export const openai = () => {};", status="added"),
            ChangedFile(path="README.md", patch="+OpenAI support", status="modified"),
        ],
    )
    return gw


@pytest.fixture
def generator():
    return ScriptedGenerator()
