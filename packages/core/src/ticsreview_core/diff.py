"""Map review comments onto the pull request diff.

GitHub only accepts a line comment when the line is part of a diff hunk on
the new side of the file. Everything else is a valid finding that still has
to be reported, just not as a line comment.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ticsreview_core.models import ChangedFile, ReviewComment, ReviewComments

logger = logging.getLogger(__name__)


def _hunk_start(header: str) -> int | None:
    """Return the first new-file line of a ``@@ -a,b +c,d @@`` header."""
    try:
        new_file_range = header.split("+")[1].split(" ")[0]
        return int(new_file_range.split(",")[0])
    except (IndexError, ValueError):
        return None


def get_commentable_lines(patch_text: str | None) -> set[int]:
    """Return the new-file line numbers covered by the hunks of a patch.

    Added and context lines count, removed lines do not. A hunk whose header
    cannot be parsed contributes nothing.
    """
    lines: set[int] = set()
    file_line: int | None = None

    for line in (patch_text or "").splitlines():
        if line.startswith("@@"):
            file_line = _hunk_start(line)
            continue
        if file_line is None:
            continue
        if line.startswith("-") and not line.startswith("---"):
            continue  # removed line, no new-file line number
        if line.startswith("\\"):
            continue  # "\ No newline at end of file"
        lines.add(file_line)
        file_line += 1

    return lines


def split_review_comments(comments: Iterable[ReviewComment], changed_files: Iterable[ChangedFile]) -> ReviewComments:
    """Partition comments into those GitHub accepts on the diff and the rest.

    Input order is kept within both partitions.
    """
    commentable = {f.filename: get_commentable_lines(f.patch) for f in changed_files if f.status != "removed"}
    result = ReviewComments()

    for comment in comments:
        if comment.line in commentable.get(comment.path, ()):
            result.postable.append(comment)
        else:
            logger.debug("Line %d of %s is outside the diff", comment.line, comment.path)
            result.unpostable.append(comment)

    return result
