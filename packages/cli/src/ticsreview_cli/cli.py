"""CLI entry point for ticsreview.

Commands:
  run      analyze a pull request with TiCS and post the results on it
  summary  render the quality gate summary of an analysis without posting
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.logging import RichHandler

from ticsreview_cli.commands.run import run_cmd
from ticsreview_cli.commands.summary import summary_cmd


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("ticsreview"),
    prog_name="ticsreview",
)
@click.option(
    "--config",
    "config_path",
    default=".ticsreview.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="TICSREVIEW_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Show internal debug traces.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Run TiCS on GitHub pull requests and post the results as review comments."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(run_cmd)
main.add_command(summary_cmd)
