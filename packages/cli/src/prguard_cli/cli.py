"""CLI entry point for prguard.

Commands:
  scan     reconcile PR comments and reviews with linter issues for a commit
  cleanup  delete prguard's informational comments from a commit's PRs
  status   set a commit status
"""

from __future__ import annotations

import importlib.metadata

import click

from prguard_cli.commands.cleanup import cleanup_cmd
from prguard_cli.commands.scan import scan_cmd
from prguard_cli.commands.status import status_cmd


@click.group()
@click.version_option(
    version=importlib.metadata.version("prguard"),
    prog_name="prguard",
)
@click.option(
    "--config",
    "config_path",
    default=".prguard.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRGUARD_CONFIG",
)
@click.option("--debug", is_flag=True, help="Log every API request.")
@click.pass_context
def main(ctx: click.Context, config_path: str, debug: bool):
    """Post linter findings on GitHub pull requests, without repeating yourself."""
    from prguard_core.config import load_config
    from prguard_cli.auth import resolve_github_token
    from prguard_cli.log import configure_logging

    configure_logging(debug)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config


main.add_command(scan_cmd)
main.add_command(cleanup_cmd)
main.add_command(status_cmd)
