"""Core action orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from github import GithubException
from rich.markup import escape

from ticsreview_core.annotations import create_review_comments
from ticsreview_core.diff import split_review_comments
from ticsreview_core.gh.pull_request import create_issue_comment, get_pull, get_repo, list_changed_files
from ticsreview_core.models import QualityGate, ReviewComment
from ticsreview_core.reconcile import ReconciliationResult, reconcile
from ticsreview_core.summary import compose_pr_comment, create_error_summary, create_review_body
from ticsreview_core.tics.analyzer import run_analysis, write_file_list
from ticsreview_core.tics.api_helper import cli_summary, get_project_name
from ticsreview_core.tics.fetcher import ViewerClient

if TYPE_CHECKING:
    from ticsreview_core.config import Config
    from ticsreview_core.logger import ActionLogger

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Outcome of one run, for the CLI to report and set the exit status."""

    repo: str
    pr_number: int
    passed: bool | None = None  # None when the analysis did not complete
    explorer_url: str | None = None
    analyzed_files: list[str] = field(default_factory=list)
    postable: list[ReviewComment] = field(default_factory=list)
    unpostable: list[ReviewComment] = field(default_factory=list)
    reconciliation: ReconciliationResult | None = None
    comment_body: str = ""
    failed: bool = False


def _determine_event(quality_gate: QualityGate) -> str:
    """Choose the GitHub review event based on the quality gate verdict."""
    return "COMMENT" if quality_gate.passed else "REQUEST_CHANGES"


def print_shadow_comments(action_logger: ActionLogger, comments: list[ReviewComment]) -> None:
    """Print review comments to the terminal without posting to GitHub."""
    console = action_logger.console
    if not comments:
        console.print("[yellow]Shadow mode: no review comments on the changed lines.[/yellow]")
        return
    console.print(f"\n[bold]Shadow review: {len(comments)} comment(s) (not posted)[/bold]\n")
    for c in comments:
        console.print(f"[bold cyan]{escape(c.path)}[/bold cyan]  line [bold]{c.line}[/bold]")
        console.print(f"  {escape(c.body.strip())}")
        console.print()


def _post_comment(pr, body: str, action_logger: ActionLogger) -> None:
    try:
        create_issue_comment(pr, body)
    except GithubException as e:
        action_logger.set_failed(f"Could not post the summary comment on this pull request: {e.status}: {e.data}")
    else:
        action_logger.info("Posted the summary comment on this pull request.")


def run_action(
    config: Config,
    action_logger: ActionLogger,
    repo_obj=None,
    viewer: ViewerClient | None = None,
    shadow: bool = False,
    analyze: Callable = run_analysis,
) -> ActionResult | None:
    """Analyze a pull request and publish the results on it.

    Returns None when the pull request has no changed files. Otherwise the
    ActionResult describes what was posted; in shadow mode nothing is posted
    and the comments and summary are printed instead.
    """
    gh = config.github
    this_repo = repo_obj if repo_obj is not None else get_repo(gh.repo, token=gh.token, api_url=gh.api_url)

    try:
        this_pr = get_pull(this_repo, gh.pull_request_number)
    except GithubException:
        raise ValueError(f"PR #{gh.pull_request_number} not found in {gh.repo}.")

    action_logger.header(f"Analyzing pull request #{gh.pull_request_number} of {gh.repo}.")
    changed_files = list_changed_files(this_pr)
    if not changed_files:
        action_logger.info("No changed files found to analyze.")
        return None
    action_logger.info(f"{len(changed_files)} changed file(s).")

    result = ActionResult(repo=gh.repo, pr_number=gh.pull_request_number)

    file_list = write_file_list(changed_files, config.tics.tmp_dir)
    analysis = analyze(config.tics, file_list, action_logger)
    cli_summary(analysis, action_logger, debug=config.debug)

    if not analysis.completed or not analysis.explorer_url:
        result.comment_body = create_error_summary(analysis.error_list, analysis.warning_list, debug=config.debug)
        if shadow:
            action_logger.console.print(result.comment_body, markup=False)
        else:
            _post_comment(this_pr, result.comment_body, action_logger)
        if not analysis.completed:
            action_logger.set_failed(f"Failed to run TiCS (exit code {analysis.status_code}).")
        else:
            action_logger.set_failed("No Explorer url found in the TiCS output.")
        result.failed = action_logger.failed
        return result

    result.explorer_url = analysis.explorer_url
    viewer = viewer if viewer is not None else ViewerClient(config.tics, action_logger)
    quality_gate = viewer.get_quality_gate(analysis.explorer_url)
    result.passed = quality_gate.passed
    result.analyzed_files = viewer.get_analyzed_files(analysis.explorer_url)

    if config.tics.post_annotations:
        annotations = viewer.get_annotations(quality_gate)
        project = get_project_name(config.tics, analysis.explorer_url)
        comments = create_review_comments(annotations, changed_files, project, config.tics.branch_name)
        split = split_review_comments(comments, changed_files)
        result.postable, result.unpostable = split.postable, split.unpostable
        action_logger.info(
            f"{len(split.postable)} finding(s) on the changed lines, {len(split.unpostable)} outside of them."
        )

        if shadow:
            print_shadow_comments(action_logger, split.postable)
        else:
            result.reconciliation = reconcile(
                this_pr,
                split.postable,
                action_logger=action_logger,
                body=create_review_body(quality_gate, len(split.postable)),
                event=_determine_event(quality_gate),
                max_pages=config.tics.max_comment_pages,
            )

    result.comment_body = compose_pr_comment(
        analysis.explorer_url, quality_gate, viewer.base_url, result.analyzed_files, result.unpostable
    )
    if shadow:
        action_logger.console.print(result.comment_body, markup=False)
    else:
        _post_comment(this_pr, result.comment_body, action_logger)

    if not quality_gate.passed:
        action_logger.set_failed(quality_gate.message or "Quality gate failed.")
    result.failed = action_logger.failed
    return result
