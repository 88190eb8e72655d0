"""cleanup command: delete prguard's own generic comments carrying given markers."""

from __future__ import annotations

import click
from rich.console import Console

from prguard_core.messages import INFORMATIONAL_MARKERS
from prguard_core.reconcile import cleanup_bot_comments

from prguard_cli.runtime import build_forge, exit_on_error

console = Console()


@click.command("cleanup")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--commit", "commit_id", required=True, help="Head commit of the pull requests to clean.")
@click.option(
    "--marker",
    "markers",
    multiple=True,
    help="Text identifying comments to delete. Repeatable. Defaults to prguard's informational messages.",
)
@click.pass_context
@exit_on_error
def cleanup_cmd(ctx, repo: str, commit_id: str, markers: tuple[str, ...]):
    """Delete generic comments posted by this account that contain a marker."""
    config = ctx.obj["config"]
    forge = build_forge(ctx, repo)
    deleted = cleanup_bot_comments(
        forge,
        commit_id,
        markers or INFORMATIONAL_MARKERS,
        config.get("branches_ignore") or [],
        bool(config.get("skip_draft_prs")),
    )
    console.print(f"Deleted {deleted} comment(s).")
