from __future__ import annotations

import logging
from typing import Iterable

from github import Auth, Github, GithubException

from ticsreview_core.models import ChangedFile, PreviousComment, ReviewComment

logger = logging.getLogger(__name__)

PER_PAGE = 100


def get_repo(repo_name: str, token: str, api_url: str = "https://api.github.com"):
    return Github(auth=Auth.Token(token), base_url=api_url, per_page=PER_PAGE).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def list_changed_files(pr) -> list[ChangedFile]:
    return sorted((ChangedFile.from_github(f) for f in pr.get_files()), key=lambda f: f.filename)


def list_review_comments(pr, max_pages: int | None = 30, per_page: int = PER_PAGE) -> tuple[list[PreviousComment], bool]:
    """Return the review comments on a PR and whether the list was cut short.

    PyGithub follows GitHub's ``Link: rel="next"`` header, so iteration stops
    exactly when the last page has been read. ``max_pages`` bounds the walk;
    when more comments exist past the bound the second value is True.
    """
    limit = None if max_pages is None else max_pages * per_page
    comments: list[PreviousComment] = []
    for comment in pr.get_review_comments():
        if limit is not None and len(comments) >= limit:
            logger.debug("Stopped listing review comments after %d page(s)", max_pages)
            return comments, True
        comments.append(PreviousComment.from_github(comment))
    return comments, False


def create_review(pr, body: str, event: str, comments: Iterable[ReviewComment]) -> None:
    pr.create_review(body=body, event=event, comments=[c.as_payload() for c in comments])


def delete_review_comments(pr, comment_ids: Iterable[int]) -> tuple[list[int], list[tuple[int, str]]]:
    """Delete review comments one by one, collecting every outcome.

    Returns the ids deleted and ``(id, reason)`` for each failure. A failure
    never stops the remaining deletions.
    """
    deleted: list[int] = []
    failed: list[tuple[int, str]] = []
    for comment_id in comment_ids:
        try:
            pr.get_review_comment(comment_id).delete()
        except GithubException as e:
            failed.append((comment_id, f"{e.status}: {e.data}"))
            continue
        deleted.append(comment_id)
    return deleted, failed


def create_issue_comment(pr, body: str) -> None:
    pr.create_issue_comment(body)
