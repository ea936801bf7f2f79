"""Render the PR-level comment.

Every function here takes its inputs explicitly and returns text; nothing is
read from configuration or module state, so the same inputs always give the
same comment.
"""

from __future__ import annotations

import html
import re
from typing import Iterable

from ticsreview_core.markdown import (
    Status,
    generate_expandable_area,
    generate_link,
    generate_status,
    generate_table,
)
from ticsreview_core.models import Condition, QualityGate, ReviewComment

QUALITY_GATE_TITLE = "## TICS Quality Gate"
FILES_HEADER = "The following files have been checked:"
UNPOSTED_HEADER = "Quality findings outside of the changes of this pull request:"

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*", re.DOTALL)
_FILES_AREA_RE = re.compile(
    r"<details><summary>" + re.escape(FILES_HEADER) + r"</summary>\n(.*?)</details>", re.DOTALL
)


def _status(passed: bool) -> Status:
    return Status.PASSED if passed else Status.FAILED


def create_error_summary(error_list: list[str], warning_list: list[str], debug: bool = False) -> str:
    """Summary posted when the analysis itself did not complete.

    Warnings are only included when debug logging is on.
    """
    summary = f"{QUALITY_GATE_TITLE}\r\n\r\n### :x: Failed"

    if error_list:
        summary += "\r\n\r\n #### The following errors have occurred during analysis:\r\n\r\n"
        for error in error_list:
            summary += f"> :x: {error}\r\n"
    if warning_list and debug:
        summary += "\r\n\r\n #### The following warnings have occurred during analysis:\r\n\r\n"
        for warning in warning_list:
            summary += f"> :warning: {warning}\r\n"

    return summary


def create_link_summary(url: str) -> str:
    return f"{generate_link('See the results in the TICS Viewer', url)}\n\n"


def create_files_summary(file_list: Iterable[str]) -> str:
    body = "".join(f"- {file}<br>" for file in file_list)
    return generate_expandable_area(FILES_HEADER, body)


def parse_files_summary(markdown: str) -> list[str]:
    """Recover the file list from a comment containing a files summary."""
    match = _FILES_AREA_RE.search(markdown)
    if match is None:
        return []
    return [entry[2:] for entry in match.group(1).split("<br>") if entry.startswith("- ")]


def _create_conditions_table(conditions: list[Condition], viewer_base_url: str) -> str:
    table = ""
    for condition in conditions:
        if condition.skipped:
            continue
        condition_status = f"{generate_status(_status(condition.passed))}  {condition.message}"

        if condition.details is not None and condition.details.items:
            headers = [["File", condition.details.title]]
            cells = [
                [generate_link(item.name, f"{viewer_base_url}/{item.link}"), item.formatted_value]
                for item in condition.details.items
                if item.item_type == "file"
            ]
            table += generate_expandable_area(condition_status, generate_table(headers, cells))
        else:
            table += f"{condition_status}\n\n\n"
    return table


def create_quality_gate_summary(quality_gate: QualityGate, viewer_base_url: str = "") -> str:
    """Overall verdict followed by one section per gate.

    Skipped conditions are left out. A condition with file-level items gets a
    collapsible table in the order the viewer returned the items.
    """
    gates = "".join(
        f"## {gate.name}\n\n{_create_conditions_table(gate.conditions, viewer_base_url)}" for gate in quality_gate.gates
    )
    return f"{QUALITY_GATE_TITLE}\n\n### {generate_status(_status(quality_gate.passed), True)}\n\n{gates}"


def comment_body_to_html(body: str) -> str:
    """Convert a review comment body to the inline HTML used inside <li>.

    Every ``**text**`` pair becomes ``<b>text</b>`` and every line break a
    ``<br>``. An unpaired ``**`` is left as is.
    """
    text = html.escape(body.strip(), quote=False)
    text = _BOLD_RE.sub(r"<b>\1</b>", text)
    return re.sub(r"\s*\r?\n", "<br>", text)


def create_unposted_review_comments_summary(unposted: Iterable[ReviewComment]) -> str:
    """Collapsible list of findings that could not be placed on the diff, per file."""
    by_path: dict[str, list[ReviewComment]] = {}
    for comment in unposted:
        by_path.setdefault(comment.path, []).append(comment)

    body = ""
    for path, comments in by_path.items():
        body += f"<b>File:</b> {path}<ul>"
        body += "".join(f"<li>{comment_body_to_html(c.body)}</li>" for c in comments)
        body += "</ul>"
    return generate_expandable_area(UNPOSTED_HEADER, body)


def create_review_body(quality_gate: QualityGate, comment_count: int) -> str:
    verdict = "passed" if quality_gate.passed else "failed"
    return f"TICS quality gate {verdict}: {comment_count} finding(s) on the changed lines of this pull request."


def compose_pr_comment(
    explorer_url: str,
    quality_gate: QualityGate,
    viewer_base_url: str,
    analyzed_files: list[str],
    unposted: list[ReviewComment] | None = None,
) -> str:
    """The single comment posted on the PR conversation."""
    body = create_link_summary(explorer_url)
    body += create_quality_gate_summary(quality_gate, viewer_base_url)
    body += create_files_summary(analyzed_files)
    if unposted:
        body += create_unposted_review_comments_summary(unposted)
    return body
