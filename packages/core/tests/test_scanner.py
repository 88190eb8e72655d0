"""Tests for the scan orchestration."""

import pytest

from prguard_core.config import DEFAULT_CONFIG
from prguard_core.errors import CommitNotInPullRequestError
from prguard_core.issues import LEVEL_ERROR, LEVEL_WARNING, IssueRecord
from prguard_core.messages import GITHUB_ERROR_STR, NO_ISSUES_FOUND_MSG, REVIEW_COMMENTS_TOTAL_MAX
from prguard_core.scanner import run_scan

REPO = "/repos/acme/widgets"
BOT = "prguard-bot"
SHA = "a" * 40
PATCH = "@@ -0,0 +1,3 @@\n+one\n+two\n+three"


def _config(**overrides):
    config = {**DEFAULT_CONFIG, "branches_ignore": [], "skip_folders": [], "file_extensions": []}
    config.update(overrides)
    return config


@pytest.fixture
def repo(client):
    """Open PR #1 at SHA touching src/app.php, with nothing posted yet."""
    client.collections[f"{REPO}/pulls"] = [{"number": 1, "head": {"sha": SHA, "ref": "feature"}}]
    client.collections[f"{REPO}/pulls/1/files"] = [
        {"filename": "src/app.php", "status": "added", "patch": PATCH},
        {"filename": "vendor/lib.php", "status": "added", "patch": PATCH},
    ]
    client.collections[f"{REPO}/pulls/1/comments"] = []
    client.collections[f"{REPO}/pulls/1/reviews"] = []
    client.collections[f"{REPO}/issues/1/comments"] = []
    client.objects[f"{REPO}/issues/1/labels"] = []
    return client


def _statuses(client):
    return [fields for _, _, fields in client.requests("POST", f"{REPO}/statuses/{SHA}")]


class TestRunScan:
    def test_no_pull_request(self, forge, client):
        client.collections[f"{REPO}/pulls"] = []
        with pytest.raises(CommitNotInPullRequestError) as excinfo:
            run_scan(forge, SHA, [], _config())
        assert excinfo.value.exit_code == 230
        assert client.requests("POST") == []

    def test_posts_comments_and_sets_failure_status(self, forge, repo):
        issues = [
            IssueRecord("src/app.php", 2, "Unescaped output", LEVEL_ERROR),
            IssueRecord("src/app.php", 3, "Slow", LEVEL_WARNING),
        ]
        summary = run_scan(forge, SHA, issues, _config())

        assert summary.pr_numbers == [1]
        assert summary.posted == 2
        (review,) = repo.requests("POST", f"{REPO}/pulls/1/reviews")
        assert review[2]["event"] == "REQUEST_CHANGES"
        (status,) = _statuses(repo)
        assert status["state"] == "failure"
        assert status["context"] == "prguard"
        assert summary.status == "failure"

    def test_skip_folders_drop_issues(self, forge, repo):
        issues = [IssueRecord("vendor/lib.php", 1, "Bad", LEVEL_ERROR)]
        summary = run_scan(forge, SHA, issues, _config(skip_folders=["vendor"]))
        assert summary.issue_count == 0
        assert repo.requests("POST", f"{REPO}/pulls/1/reviews") == []
        assert _statuses(repo)[0]["state"] == "success"

    def test_old_informational_comments_cleaned_up(self, forge, repo):
        repo.collections[f"{REPO}/issues/1/comments"] = [
            {"id": 11, "body": GITHUB_ERROR_STR, "user": {"login": BOT}},
            {"id": 12, "body": GITHUB_ERROR_STR, "user": {"login": "human"}},
        ]
        summary = run_scan(forge, SHA, [], _config())
        assert summary.cleaned_up == 1
        assert repo.requests("DELETE") == [("DELETE", f"{REPO}/issues/comments/11")]

    def test_ceiling_warning_posted_once(self, forge, repo):
        issues = [IssueRecord("src/app.php", line, f"m{line}") for line in (1, 2, 3)]
        summary = run_scan(forge, SHA, issues, _config(review_comments_total_max=2))
        assert summary.suppressed == 1
        assert summary.warned == [1]
        warnings = [
            f for _, _, f in repo.requests("POST", f"{REPO}/issues/1/comments") if REVIEW_COMMENTS_TOTAL_MAX in f["body"]
        ]
        assert len(warnings) == 1

    def test_stale_review_dismissed(self, forge, repo):
        repo.collections[f"{REPO}/pulls/1/reviews"] = [
            {"id": 50, "user": {"login": BOT}, "state": "CHANGES_REQUESTED"}
        ]
        repo.collections[f"{REPO}/pulls/1/comments"] = [
            {"id": 5, "path": "src/app.php", "position": None, "body": "x", "user": {"login": BOT}, "pull_request_review_id": 50}
        ]
        summary = run_scan(forge, SHA, [], _config())
        assert summary.dismissed == {1: [50]}

    def test_dismissal_can_be_turned_off(self, forge, repo):
        repo.collections[f"{REPO}/pulls/1/reviews"] = [
            {"id": 50, "user": {"login": BOT}, "state": "CHANGES_REQUESTED"}
        ]
        repo.collections[f"{REPO}/pulls/1/comments"] = [
            {"id": 5, "path": "src/app.php", "position": None, "body": "x", "user": {"login": BOT}, "pull_request_review_id": 50}
        ]
        summary = run_scan(forge, SHA, [], _config(dismiss_stale_reviews=False))
        assert summary.dismissed == {}
        assert repo.requests("PUT") == []

    def test_no_issues_found_comment(self, forge, repo):
        run_scan(forge, SHA, [], _config(report_no_issues_found=True))
        (comment,) = repo.requests("POST", f"{REPO}/issues/1/comments")
        assert comment[2]["body"].startswith(NO_ISSUES_FOUND_MSG)

    def test_autoapprove_with_label(self, forge, repo):
        summary = run_scan(forge, SHA, [], _config(autoapprove=True, autoapprove_label="prguard-ok"))
        assert summary.approved == [1]
        (review,) = repo.requests("POST", f"{REPO}/pulls/1/reviews")
        assert review[2]["event"] == "APPROVE"
        assert repo.requests("POST", f"{REPO}/issues/1/labels") == [
            ("POST", f"{REPO}/issues/1/labels", {"labels": ["prguard-ok"]})
        ]

    def test_issues_block_approval_and_remove_label(self, forge, repo):
        repo.objects[f"{REPO}/issues/1/labels"] = [{"name": "prguard-ok"}]
        issues = [IssueRecord("src/app.php", 1, "Bad", LEVEL_WARNING)]
        summary = run_scan(forge, SHA, issues, _config(autoapprove=True, autoapprove_label="prguard-ok"))
        assert summary.approved == []
        assert repo.requests("DELETE", f"{REPO}/issues/1/labels/prguard-ok")

    def test_status_target_url(self, forge, repo):
        run_scan(forge, SHA, [], _config(status_context="lint", status_target_url="https://ci.example/7"))
        (status,) = _statuses(repo)
        assert status == {
            "state": "success",
            "description": "No issues found",
            "context": "lint",
            "target_url": "https://ci.example/7",
        }

    def test_stale_ceiling_warning_removed(self, forge, repo):
        repo.collections[f"{REPO}/issues/1/comments"] = [
            {"id": 77, "body": REVIEW_COMMENTS_TOTAL_MAX, "user": {"login": BOT}},
        ]
        issues = [IssueRecord("src/app.php", 1, "Bad", LEVEL_WARNING)]
        summary = run_scan(forge, SHA, issues, _config(review_comments_total_max=200))
        assert summary.suppressed == 0
        assert summary.warned == []
        assert repo.requests("DELETE") == [("DELETE", f"{REPO}/issues/comments/77")]

    def test_ceiling_warning_reposted_while_still_over(self, forge, repo):
        repo.collections[f"{REPO}/issues/1/comments"] = [
            {"id": 77, "body": REVIEW_COMMENTS_TOTAL_MAX, "user": {"login": BOT}},
        ]
        issues = [IssueRecord("src/app.php", line, f"m{line}") for line in (1, 2)]
        summary = run_scan(forge, SHA, issues, _config(review_comments_total_max=1))
        assert summary.suppressed == 1
        assert repo.requests("DELETE") == [("DELETE", f"{REPO}/issues/comments/77")]
        warnings = [
            f for _, _, f in repo.requests("POST", f"{REPO}/issues/1/comments") if REVIEW_COMMENTS_TOTAL_MAX in f["body"]
        ]
        assert len(warnings) == 1
