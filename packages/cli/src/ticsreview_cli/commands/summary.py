"""summary command: render the quality gate of an analysis without posting it."""

from __future__ import annotations

import click
from rich.console import Console

from ticsreview_core.config import ConfigError, load_config
from ticsreview_core.logger import ActionLogger
from ticsreview_core.summary import create_link_summary, create_quality_gate_summary
from ticsreview_core.tics.fetcher import ViewerClient


@click.command("summary")
@click.option("--viewer-url", default=None, help="TiCS configuration url (https://host/tiobeweb/TiCS/api/cfg?name=<config>).")
@click.option("--explorer-url", required=True, help="Explorer link printed by the TiCS client after an analysis.")
@click.option("--branch", default=None, help="TiCS branch name.")
@click.pass_context
def summary_cmd(ctx, viewer_url: str | None, explorer_url: str, branch: str | None):
    """Print the markdown quality gate summary for an analysis.

    Useful to check what the action would post without touching the pull request.
    """
    config_path = (ctx.obj or {}).get("config_path", ".ticsreview.yml")
    try:
        config = load_config(config_path, cli_overrides={"viewer_url": viewer_url, "branch_name": branch})
    except ConfigError as e:
        raise click.UsageError(str(e))
    if not config.tics.viewer_url:
        raise click.UsageError("No TiCS viewer url given. Pass --viewer-url or set viewer_url in the config file.")

    # progress goes to stderr so stdout is only the markdown
    action_logger = ActionLogger(
        secrets_filter=config.tics.secrets_filter, debug=config.debug, console=Console(stderr=True, highlight=False)
    )
    action_logger.register_secret(config.tics.auth_token)

    viewer = ViewerClient(config.tics, action_logger)
    quality_gate = viewer.get_quality_gate(explorer_url)
    click.echo(create_link_summary(explorer_url) + create_quality_gate_summary(quality_gate, viewer.base_url))
