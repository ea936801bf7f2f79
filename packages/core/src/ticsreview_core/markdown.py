"""Markdown building blocks for the PR comment and review bodies.

Only the shapes the summaries actually use: links, status badges,
<details> areas and pipe tables.
"""

from __future__ import annotations

from enum import Enum


class Status(Enum):
    FAILED = 0
    PASSED = 1
    SKIPPED = 2
    WARNING = 3


_STATUS_ICON = {
    Status.FAILED: ":x:",
    Status.PASSED: ":heavy_check_mark:",
    Status.SKIPPED: ":grey_question:",
    Status.WARNING: ":warning:",
}


def generate_link(text: str, url: str) -> str:
    return f"[{text}]({url})"


def generate_status(status: Status, has_suffix: bool = False) -> str:
    """Return the emoji for a status, followed by its name when has_suffix is set."""
    icon = _STATUS_ICON[status]
    if has_suffix:
        return f"{icon} {status.name.capitalize()}"
    return icon


def generate_expandable_area(header: str, body: str) -> str:
    return f"<details><summary>{header}</summary>\n{body}</details>\n\n"


def _escape_cell(cell) -> str:
    return str(cell).replace("|", "\\|").replace("\n", " ")


def generate_table(headers: list[list[str]], cells: list[list[str]]) -> str:
    """Render a GitHub pipe table.

    ``headers`` is a list of header rows; only the first one is used as the
    column header, matching how the viewer summaries are built.
    """
    if not headers:
        return ""
    header = headers[0]
    lines = [
        "| " + " | ".join(_escape_cell(h) for h in header) + " |",
        "|" + "|".join("---" for _ in header) + "|",
    ]
    for row in cells:
        lines.append("| " + " | ".join(_escape_cell(c) for c in row) + " |")
    return "\n".join(lines) + "\n"
