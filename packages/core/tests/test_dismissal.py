"""Tests for dismissing reviews whose inline comments have all gone stale."""

from prguard_core.messages import DISMISS_REVIEW_MSG
from prguard_core.reconcile import dismiss_reviews_with_no_active_comments

REPO = "/repos/acme/widgets"
BOT = "prguard-bot"


def _review(id, author=BOT, state="CHANGES_REQUESTED"):
    return {"id": id, "user": {"login": author}, "state": state}


def _comment(id, review_id, position, author=BOT):
    return {
        "id": id,
        "path": "src/app.php",
        "position": position,
        "body": "msg",
        "user": {"login": author},
        "pull_request_review_id": review_id,
    }


def _dismissed(client):
    return [path for _, path, _ in client.requests("PUT")]


def _dismissal_path(review_id, pr=1):
    return f"{REPO}/pulls/{pr}/reviews/{review_id}/dismissals"


class TestDismissReviewsWithNoActiveComments:
    def test_all_obsolete_review_dismissed(self, forge, client):
        client.collections[f"{REPO}/pulls/1/reviews"] = [_review(10)]
        client.collections[f"{REPO}/pulls/1/comments"] = [_comment(1, 10, None), _comment(2, 10, None)]

        assert dismiss_reviews_with_no_active_comments(forge, 1) == [10]

        (put,) = client.requests("PUT")
        assert put[1] == _dismissal_path(10)
        assert put[2] == {"message": DISMISS_REVIEW_MSG}

    def test_active_comment_after_obsolete_vetoes(self, forge, client):
        client.collections[f"{REPO}/pulls/1/reviews"] = [_review(10)]
        client.collections[f"{REPO}/pulls/1/comments"] = [_comment(1, 10, None), _comment(2, 10, 5)]
        assert dismiss_reviews_with_no_active_comments(forge, 1) == []
        assert client.requests("PUT") == []

    def test_active_comment_before_obsolete_vetoes(self, forge, client):
        client.collections[f"{REPO}/pulls/1/reviews"] = [_review(10)]
        client.collections[f"{REPO}/pulls/1/comments"] = [_comment(1, 10, 5), _comment(2, 10, None)]
        assert dismiss_reviews_with_no_active_comments(forge, 1) == []
        assert client.requests("PUT") == []

    def test_no_comments_at_all_dismisses_nothing(self, forge, client):
        client.collections[f"{REPO}/pulls/1/reviews"] = [_review(10), _review(11)]
        client.collections[f"{REPO}/pulls/1/comments"] = []
        assert dismiss_reviews_with_no_active_comments(forge, 1) == []
        assert client.requests("PUT") == []

    def test_review_without_comments_is_kept(self, forge, client):
        client.collections[f"{REPO}/pulls/1/reviews"] = [_review(10), _review(11)]
        client.collections[f"{REPO}/pulls/1/comments"] = [_comment(1, 10, None)]
        assert dismiss_reviews_with_no_active_comments(forge, 1) == [10]
        assert _dismissed(client) == [_dismissal_path(10)]

    def test_only_own_changes_requested_reviews(self, forge, client):
        client.collections[f"{REPO}/pulls/1/reviews"] = [
            _review(10, state="COMMENTED"),
            _review(11, author="human"),
            _review(12),
        ]
        client.collections[f"{REPO}/pulls/1/comments"] = [
            _comment(1, 10, None),
            _comment(2, 11, None, author="human"),
            _comment(3, 12, None),
        ]
        assert dismiss_reviews_with_no_active_comments(forge, 1) == [12]

    def test_other_authors_comments_do_not_veto(self, forge, client):
        client.collections[f"{REPO}/pulls/1/reviews"] = [_review(10)]
        client.collections[f"{REPO}/pulls/1/comments"] = [
            _comment(1, 10, None),
            _comment(2, 10, 3, author="human"),
        ]
        assert dismiss_reviews_with_no_active_comments(forge, 1) == [10]

    def test_each_review_judged_on_its_own_comments(self, forge, client):
        client.collections[f"{REPO}/pulls/1/reviews"] = [_review(10), _review(11)]
        client.collections[f"{REPO}/pulls/1/comments"] = [
            _comment(1, 10, None),
            _comment(2, 11, None),
            _comment(3, 11, 7),
        ]
        assert dismiss_reviews_with_no_active_comments(forge, 1) == [10]

    def test_reads_fresh_comments(self, forge, client):
        client.collections[f"{REPO}/pulls/1/reviews"] = [_review(10)]
        client.collections[f"{REPO}/pulls/1/comments"] = [_comment(1, 10, None)]
        dismiss_reviews_with_no_active_comments(forge, 1)
        client.collections[f"{REPO}/pulls/1/comments"] = [_comment(1, 10, None), _comment(2, 10, 2)]
        client.calls.clear()

        dismiss_reviews_with_no_active_comments(forge, 1)

        assert client.requests("GET", f"{REPO}/pulls/1/comments")
        assert client.requests("PUT") == []
