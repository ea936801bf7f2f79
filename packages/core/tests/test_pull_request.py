"""Tests for GitHub pull request helper functions."""

from unittest.mock import MagicMock

from github import GithubException

from ticsreview_core.gh.pull_request import (
    create_issue_comment,
    create_review,
    delete_review_comments,
    list_changed_files,
    list_review_comments,
)
from ticsreview_core.models import ReviewComment


def _github_file(filename, status="modified", patch="@@ -1 +1 @@\n+x"):
    f = MagicMock()
    f.filename = filename
    f.status = status
    f.patch = patch
    f.previous_filename = None
    f.additions = 1
    f.deletions = 0
    return f


def _github_comment(comment_id, line=1, original_line=None):
    c = MagicMock()
    c.id = comment_id
    c.path = "src/a.c"
    c.line = line
    c.original_line = original_line
    c.body = "body"
    return c


class TestListChangedFiles:
    def test_sorted_and_converted(self):
        pr = MagicMock()
        pr.get_files.return_value = [_github_file("src/b.c"), _github_file("src/a.c", status="added")]

        files = list_changed_files(pr)

        assert [f.filename for f in files] == ["src/a.c", "src/b.c"]
        assert files[0].status == "added"
        assert files[0].patch == "@@ -1 +1 @@\n+x"


class TestListReviewComments:
    def test_reads_until_github_reports_no_more(self):
        pr = MagicMock()
        pr.get_review_comments.return_value = [_github_comment(i) for i in range(5)]

        comments, truncated = list_review_comments(pr)

        assert [c.id for c in comments] == [0, 1, 2, 3, 4]
        assert truncated is False

    def test_bound_reached_is_reported(self):
        pr = MagicMock()
        pr.get_review_comments.return_value = [_github_comment(i) for i in range(5)]

        comments, truncated = list_review_comments(pr, max_pages=2, per_page=2)

        assert len(comments) == 4
        assert truncated is True

    def test_exactly_at_bound_is_not_truncated(self):
        pr = MagicMock()
        pr.get_review_comments.return_value = [_github_comment(i) for i in range(4)]

        comments, truncated = list_review_comments(pr, max_pages=2, per_page=2)

        assert len(comments) == 4
        assert truncated is False

    def test_unbounded(self):
        pr = MagicMock()
        pr.get_review_comments.return_value = [_github_comment(i) for i in range(250)]

        comments, truncated = list_review_comments(pr, max_pages=None, per_page=1)

        assert len(comments) == 250
        assert truncated is False

    def test_outdated_comment_uses_original_line(self):
        pr = MagicMock()
        pr.get_review_comments.return_value = [_github_comment(1, line=None, original_line=7)]

        comments, _ = list_review_comments(pr)

        assert comments[0].line == 7


class TestDeleteReviewComments:
    def test_all_outcomes_collected(self):
        pr = MagicMock()
        ok = MagicMock()
        broken = MagicMock()
        broken.delete.side_effect = GithubException(403, {"message": "Forbidden"})
        pr.get_review_comment.side_effect = [ok, broken, ok]

        deleted, failed = delete_review_comments(pr, [1, 2, 3])

        assert deleted == [1, 3]
        assert [cid for cid, _ in failed] == [2]
        assert "403" in failed[0][1]

    def test_nothing_to_delete(self):
        pr = MagicMock()
        assert delete_review_comments(pr, []) == ([], [])
        pr.get_review_comment.assert_not_called()


def test_create_review_sends_line_payloads():
    pr = MagicMock()
    create_review(pr, body="b", event="COMMENT", comments=[ReviewComment(body="x", path="src/a.c", line=3)])
    pr.create_review.assert_called_once_with(
        body="b", event="COMMENT", comments=[{"path": "src/a.c", "line": 3, "body": "x"}]
    )


def test_create_issue_comment():
    pr = MagicMock()
    create_issue_comment(pr, "hello")
    pr.create_issue_comment.assert_called_once_with("hello")
