"""status command: set a commit status."""

from __future__ import annotations

import click
from rich.console import Console

from prguard_core.gh.mutations import COMMIT_STATES, set_commit_status

from prguard_cli.runtime import build_forge, exit_on_error

console = Console()


@click.command("status")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--commit", "commit_id", required=True, help="SHA of the commit.")
@click.option("--state", required=True, type=click.Choice(COMMIT_STATES))
@click.option("--description", required=True, help="Short text shown next to the status.")
@click.option("--context", "status_context", default=None, help="Status context. Defaults to the configured one.")
@click.option("--target-url", default=None, help="Link shown with the status.")
@click.pass_context
@exit_on_error
def status_cmd(
    ctx,
    repo: str,
    commit_id: str,
    state: str,
    description: str,
    status_context: str | None,
    target_url: str | None,
):
    """Set the commit status of COMMIT."""
    config = ctx.obj["config"]
    forge = build_forge(ctx, repo)
    set_commit_status(
        forge,
        commit_id,
        state,
        description,
        status_context or config["status_context"],
        target_url or config.get("status_target_url"),
    )
    console.print(f"Status [bold]{state}[/bold] set on {commit_id[:12]}.")
