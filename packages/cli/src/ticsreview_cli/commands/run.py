"""run command: analyze a pull request and post the results."""

from __future__ import annotations

import click

from ticsreview_core.action import run_action
from ticsreview_core.config import LOG_LEVELS, ConfigError, load_config
from ticsreview_core.logger import ActionLogger


def _split_terms(value: str | None) -> list[str] | None:
    if value is None:
        return None
    return [term.strip() for term in value.split(",") if term.strip()]


@click.command("run")
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Defaults to GITHUB_REPOSITORY.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Defaults to the PR of the triggering event.",
)
@click.option("--viewer-url", default=None, help="TiCS configuration url (https://host/tiobeweb/TiCS/api/cfg?name=<config>).")
@click.option("--project", default=None, help="TiCS project name, or 'auto' to take it from the viewer.")
@click.option("--branch", default=None, help="TiCS branch name.")
@click.option("--calc", default=None, help="Metrics to calculate, passed to the TiCS client.")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), default=None, help="Log level of the action output.")
@click.option("--secrets-filter", default=None, help="Comma separated extra terms whose values are masked in logs.")
@click.option(
    "--max-comment-pages",
    type=click.IntRange(min=1),
    default=None,
    help="Pages of 100 existing review comments to read before cleaning up.",
)
@click.option("--no-annotations", is_flag=True, help="Only post the summary comment, no review comments.")
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print review comments and the summary without posting to GitHub.",
)
@click.pass_context
def run_cmd(
    ctx,
    repo: str | None,
    pr_number: int | None,
    viewer_url: str | None,
    project: str | None,
    branch: str | None,
    calc: str | None,
    log_level: str | None,
    secrets_filter: str | None,
    max_comment_pages: int | None,
    no_annotations: bool,
    shadow: bool,
):
    """Run TiCS on a pull request and post its findings.

    Findings on changed lines become review comments; stale TiCS comments of
    earlier runs are removed; the quality gate verdict is posted as a PR comment.

    \b
    Required environment variables:
      GITHUB_TOKEN     GitHub token (or use gh CLI)
      TICSAUTHTOKEN    TiCS viewer token, when the viewer requires one
    """
    from ticsreview_cli.auth import resolve_github_token, resolve_tics_token

    config_path = (ctx.obj or {}).get("config_path", ".ticsreview.yml")
    try:
        config = load_config(
            config_path,
            cli_overrides={
                "repo": repo,
                "pull_request_number": pr_number,
                "viewer_url": viewer_url,
                "project_name": project,
                "branch_name": branch,
                "calc": calc,
                "log_level": log_level,
                "secrets_filter": _split_terms(secrets_filter),
                "max_comment_pages": max_comment_pages,
                "post_annotations": False if no_annotations else None,
            },
        )
    except ConfigError as e:
        raise click.UsageError(str(e))

    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    config.github.token = token
    config.tics.auth_token = config.tics.auth_token or resolve_tics_token()

    if not config.github.repo:
        raise click.UsageError("No repository given. Pass --repo or set GITHUB_REPOSITORY.")
    if config.github.pull_request_number is None:
        raise click.UsageError("No pull request number given. Pass --pr or run on a pull_request event.")
    if not config.tics.viewer_url:
        raise click.UsageError("No TiCS viewer url given. Pass --viewer-url or set viewer_url in the config file.")

    action_logger = ActionLogger(secrets_filter=config.tics.secrets_filter, debug=config.debug)
    action_logger.register_secret(config.github.token)
    action_logger.register_secret(config.tics.auth_token)

    try:
        result = run_action(config, action_logger, shadow=shadow)
    except ValueError as e:
        raise click.ClickException(str(e))

    if result is not None and result.failed:
        ctx.exit(1)
