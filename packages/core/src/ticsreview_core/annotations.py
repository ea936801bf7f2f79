"""Turn raw viewer annotations into review comments.

Annotations arrive unordered and often repeated (the same violation reported
once per occurrence). They are filtered to the files of the pull request,
merged per identity, ordered by file and line, and rendered into the comment
body GitHub shows on the diff.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from ticsreview_core.models import REVIEW_COMMENT_MARKER, Annotation, ChangedFile, ReviewComment

logger = logging.getLogger(__name__)


def _changed_names(changed_files: Iterable[ChangedFile | str]) -> list[str]:
    return [f if isinstance(f, str) else f.filename for f in changed_files]


def _sort_key(annotation: Annotation) -> tuple:
    # path and line first, the rest only to make ties deterministic
    return (
        annotation.full_path,
        annotation.line,
        annotation.type,
        annotation.rule,
        annotation.level,
        annotation.category,
        annotation.msg,
    )


def is_in_changed_files(full_path: str, changed_names: list[str]) -> bool:
    return any(name and name in full_path for name in changed_names)


def group_annotations(annotations: Iterable[Annotation], changed_files: Iterable[ChangedFile | str]) -> list[Annotation]:
    """Filter, merge and order annotations.

    Annotations on files outside the pull request are dropped. Annotations
    sharing path, type, line, rule, level, category and message collapse into
    one whose count is the sum of theirs. The result is sorted by path and
    line and does not depend on the input order; grouping an already grouped
    list returns it unchanged.
    """
    changed_names = _changed_names(changed_files)
    groups: dict[tuple, Annotation] = {}

    for annotation in sorted(annotations, key=_sort_key):
        if not is_in_changed_files(annotation.full_path, changed_names):
            logger.debug("Dropping annotation on %s (not changed in this pull request)", annotation.full_path)
            continue
        existing = groups.get(annotation.identity)
        if existing is None:
            groups[annotation.identity] = annotation
        else:
            groups[annotation.identity] = replace(existing, count=existing.count + annotation.count)

    # dicts keep insertion order, and insertion followed the sorted input
    return list(groups.values())


def strip_project_prefix(full_path: str, project: str, branch: str) -> str:
    """Convert a viewer path (HIE://project/branch/src/a.c) to a repo-relative one."""
    prefix = f"HIE://{project}/{branch}/"
    if full_path.startswith(prefix):
        return full_path[len(prefix) :]
    return full_path


def format_comment_body(annotation: Annotation) -> str:
    display_count = "" if annotation.count == 1 else f"({annotation.count}x) "
    return (
        f"{REVIEW_COMMENT_MARKER}{annotation.type} violation: {annotation.msg}** \r\n"
        f"{display_count}Line: {annotation.line}, Rule: {annotation.rule}, "
        f"Level: {annotation.level}, Category: {annotation.category} \r\n"
    )


def create_review_comments(
    annotations: Iterable[Annotation],
    changed_files: Iterable[ChangedFile | str],
    project: str,
    branch: str,
) -> list[ReviewComment]:
    """Group annotations and build one review comment per group."""
    return [
        ReviewComment(
            body=format_comment_body(annotation),
            path=strip_project_prefix(annotation.full_path, project, branch),
            line=annotation.line,
        )
        for annotation in group_annotations(annotations, changed_files)
    ]
