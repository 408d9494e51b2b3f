import pytest
from unittest.mock import MagicMock, patch

from github.GithubException import GithubException

from docsync.exceptions import MissingCredentialError, RemoteOperationError
from docsync.gateway.github_gateway import GitHubGateway


# Fixtures
@pytest.fixture
def gh_repo():
    return MagicMock()


@pytest.fixture
def gateway(gh_repo):
    # Patch Github before instantiation to avoid real API calls
    with patch("docsync.gateway.github_gateway.Github") as mock_gh:
        mock_gh.return_value.get_repo.return_value = gh_repo
        yield GitHubGateway(gh_token="fake_token")


def _pr(number, title="t", body="b", head="feature", base="main"):
    pr = MagicMock()
    pr.number = number
    pr.title = title
    pr.body = body
    pr.head.ref = head
    pr.base.ref = base
    return pr


# Tests
def test_init_requires_token():
    with patch("docsync.gateway.github_gateway.config") as mock_config:
        mock_config.GITHUB_TOKEN = None
        with pytest.raises(MissingCredentialError):
            GitHubGateway()


def test_repo_is_cached(gateway, gh_repo):
    gh_repo.default_branch = "main"
    gateway.get_default_branch("acme", "widgets")
    gateway.get_default_branch("acme", "widgets")
    gateway.gh.get_repo.assert_called_once_with("acme/widgets")


def test_read_file_returns_content(gateway, gh_repo):
    gh_repo.get_contents.return_value.decoded_content = b"# Title"
    gh_repo.get_contents.return_value.sha = "abc"

    remote = gateway.read_file("acme", "widgets", "docs/a.mdx", "main")

    assert remote.content == "# Title"
    assert remote.sha == "abc"
    gh_repo.get_contents.assert_called_once_with("docs/a.mdx", ref="main")


def test_read_file_missing_is_none(gateway, gh_repo):
    gh_repo.get_contents.side_effect = GithubException(404, {"message": "Not Found"}, None)
    assert gateway.read_file("acme", "widgets", "docs/a.mdx", "main") is None


def test_read_file_other_errors_raise(gateway, gh_repo):
    gh_repo.get_contents.side_effect = GithubException(500, {"message": "boom"}, None)
    with pytest.raises(RemoteOperationError):
        gateway.read_file("acme", "widgets", "docs/a.mdx", "main")


def test_read_directory_raises(gateway, gh_repo):
    gh_repo.get_contents.return_value = [MagicMock(), MagicMock()]
    with pytest.raises(RemoteOperationError):
        gateway.read_file("acme", "widgets", "docs", "main")


def test_write_file_creates_or_updates(gateway, gh_repo):
    gateway.write_file("acme", "widgets", "docs/a.mdx", "body", "msg", "docs/x")
    gh_repo.create_file.assert_called_once_with(path="docs/a.mdx", message="msg", content="body", branch="docs/x")

    gateway.write_file("acme", "widgets", "docs/a.mdx", "body2", "msg", "docs/x", prior_sha="abc")
    gh_repo.update_file.assert_called_once_with(
        path="docs/a.mdx", message="msg", content="body2", sha="abc", branch="docs/x"
    )


def test_create_branch_uses_full_ref(gateway, gh_repo):
    gateway.create_branch("acme", "widgets", "docs/update-pr-42", "abcdef123")
    gh_repo.create_git_ref.assert_called_once_with(ref="refs/heads/docs/update-pr-42", sha="abcdef123")


def test_create_branch_failure_is_remote_error(gateway, gh_repo):
    gh_repo.create_git_ref.side_effect = GithubException(422, {"message": "Reference already exists"}, None)
    with pytest.raises(RemoteOperationError):
        gateway.create_branch("acme", "widgets", "docs/update-pr-42", "abcdef123")


def test_get_branch_tip(gateway, gh_repo):
    gh_repo.get_git_ref.return_value.object.sha = "tip123"
    assert gateway.get_branch_tip("acme", "widgets", "main") == "tip123"
    gh_repo.get_git_ref.assert_called_once_with("heads/main")


def test_list_open_pull_requests(gateway, gh_repo):
    gh_repo.get_pulls.return_value = [_pr(1, title="A", body=None), _pr(2, title="B")]

    pulls = gateway.list_open_pull_requests("acme", "widgets")

    assert [p.number for p in pulls] == [1, 2]
    assert pulls[0].body == ""
    gh_repo.get_pulls.assert_called_once_with(state="open")


def test_create_pull_request_returns_number(gateway, gh_repo):
    gh_repo.create_pull.return_value.number = 101
    number = gateway.create_pull_request("acme", "widgets", "title", "body", "docs/x", "main")
    assert number == 101
    gh_repo.create_pull.assert_called_once_with(title="title", body="body", head="docs/x", base="main")


def test_update_pull_request(gateway, gh_repo):
    gateway.update_pull_request("acme", "widgets", 101, "new title", "new body")
    gh_repo.get_pull.return_value.edit.assert_called_once_with(title="new title", body="new body")


def test_labels_and_comments_go_through_issues(gateway, gh_repo):
    gateway.set_labels("acme", "widgets", 101, ["documentation", "automated"])
    gateway.add_comment("acme", "widgets", 42, "hello")

    issue = gh_repo.get_issue.return_value
    issue.set_labels.assert_called_once_with("documentation", "automated")
    issue.create_comment.assert_called_once_with("hello")


def test_list_changed_files(gateway, gh_repo):
    changed = MagicMock(filename="src/a.ts", patch=None, status="added")
    gh_repo.get_pull.return_value.get_files.return_value = [changed]

    files = gateway.list_changed_files("acme", "widgets", 42)

    assert files[0].path == "src/a.ts"
    assert files[0].patch == ""
    assert files[0].status == "added"


def test_find_branch_tip(gateway, gh_repo):
    gh_repo.get_git_ref.return_value.object.sha = "tip123"
    assert gateway.find_branch_tip("acme", "widgets", "docs/update-pr-42") == "tip123"
    gh_repo.get_git_ref.assert_called_once_with("heads/docs/update-pr-42")


def test_find_branch_tip_missing_is_none(gateway, gh_repo):
    gh_repo.get_git_ref.side_effect = GithubException(404, {"message": "Not Found"}, None)
    assert gateway.find_branch_tip("acme", "widgets", "docs/update-pr-42") is None


def test_find_branch_tip_other_errors_raise(gateway, gh_repo):
    gh_repo.get_git_ref.side_effect = GithubException(500, {"message": "boom"}, None)
    with pytest.raises(RemoteOperationError):
        gateway.find_branch_tip("acme", "widgets", "docs/update-pr-42")


def test_gateway_calls_do_not_log_without_run_id(gateway, gh_repo, caplog):
    caplog.set_level("DEBUG", logger="docsync")
    gh_repo.create_git_ref.side_effect = GithubException(422, {"message": "Reference already exists"}, None)

    gateway.write_file("acme", "widgets", "docs/a.mdx", "body", "msg", "docs/x")
    gateway.create_pull_request("acme", "widgets", "title", "body", "docs/x", "main")
    with pytest.raises(RemoteOperationError):
        gateway.create_branch("acme", "widgets", "docs/update-pr-42", "abcdef123")

    assert [r for r in caplog.records if r.name.startswith("docsync") and r.run_id == "N/A"] == []
