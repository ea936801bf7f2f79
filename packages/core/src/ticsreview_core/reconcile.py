"""Reconcile this run's review comments with those posted by earlier runs.

Comments are matched by (path, line, body). A TiCS comment from an earlier run
that no longer reproduces is deleted; one that still reproduces is kept and
not posted again; a finding without a matching comment is posted in a new
review. Comments not written by this action are never touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from github import GithubException

from ticsreview_core.gh.pull_request import create_review, delete_review_comments, list_review_comments
from ticsreview_core.models import REVIEW_COMMENT_MARKER, PreviousComment, ReviewComment

if TYPE_CHECKING:
    from ticsreview_core.logger import ActionLogger

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationPlan:
    delete: list[PreviousComment] = field(default_factory=list)
    keep: list[PreviousComment] = field(default_factory=list)
    create: list[ReviewComment] = field(default_factory=list)


@dataclass
class ReconciliationResult:
    plan: ReconciliationPlan
    deleted: list[int] = field(default_factory=list)
    failed_deletions: list[tuple[int, str]] = field(default_factory=list)
    review_posted: bool = False
    truncated: bool = False
    listing_failed: bool = False

    @property
    def ok(self) -> bool:
        return not self.listing_failed and not self.failed_deletions and (self.review_posted or not self.plan.create)


def is_tics_comment(body: str | None) -> bool:
    return (body or "").lstrip().startswith(REVIEW_COMMENT_MARKER)


def plan_reconciliation(previous: Iterable[PreviousComment], postable: Iterable[ReviewComment]) -> ReconciliationPlan:
    """Decide which previous comments to delete or keep and which new ones to post.

    Only previous comments carrying the TiCS marker take part. ``delete`` is
    every such comment whose key is not among the postable ones; ``create`` is
    every postable comment not already on the PR, in input order, each key once.
    """
    wanted: dict[tuple, ReviewComment] = {}
    for comment in postable:
        wanted.setdefault(comment.key, comment)

    plan = ReconciliationPlan()
    posted_keys: set[tuple] = set()
    for comment in previous:
        if not is_tics_comment(comment.body):
            continue
        if comment.key in wanted:
            plan.keep.append(comment)
            posted_keys.add(comment.key)
        else:
            plan.delete.append(comment)

    plan.create = [c for key, c in wanted.items() if key not in posted_keys]
    return plan


def reconcile(
    pr,
    postable: list[ReviewComment],
    *,
    action_logger: ActionLogger,
    body: str,
    event: str = "COMMENT",
    max_pages: int | None = 30,
) -> ReconciliationResult:
    """Bring the review comments on ``pr`` in line with ``postable``.

    Listing finishes before anything is changed, and every deletion is
    attempted before the new review is created. Failures are reported through
    the action logger and mark the run failed; they are never raised, so the
    PR summary can still be posted.
    """
    action_logger.header("Reconciling review comments.")
    try:
        previous, truncated = list_review_comments(pr, max_pages=max_pages)
    except GithubException as e:
        # nothing known about earlier runs: delete nothing, post everything
        action_logger.set_failed(f"Could not list the review comments of this pull request: {e.status}: {e.data}")
        previous, truncated = [], False
        listing_failed = True
    else:
        listing_failed = False
    if truncated:
        action_logger.warning(
            f"Pull request has more than {max_pages} page(s) of review comments; "
            "comments beyond that were not considered for cleanup and may be posted again. "
            "Raise max_comment_pages to include them."
        )

    plan = plan_reconciliation(previous, postable)
    action_logger.info(
        f"Review comments: {len(plan.keep)} kept, {len(plan.delete)} stale, {len(plan.create)} new."
    )
    result = ReconciliationResult(plan=plan, truncated=truncated, listing_failed=listing_failed)

    if plan.delete:
        action_logger.info("Deleting review comments of previous runs.")
        result.deleted, result.failed_deletions = delete_review_comments(pr, [c.id for c in plan.delete])
        for comment_id, reason in result.failed_deletions:
            action_logger.set_failed(f"Could not delete review comment {comment_id}: {reason}")

    if plan.create:
        try:
            create_review(pr, body=body, event=event, comments=plan.create)
        except GithubException as e:
            action_logger.set_failed(f"Could not post a review on this pull request: {e.status}: {e.data}")
        else:
            result.review_posted = True
            action_logger.info("Posted a review for this pull request.")
    else:
        logger.debug("No new review comments to post")

    return result
