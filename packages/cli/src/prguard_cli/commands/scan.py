"""scan command: reconcile a commit's pull requests with linter issues."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.table import Table

from prguard_core.gh.repo import get_rate_limit
from prguard_core.issues import load_issues
from prguard_core.scanner import ScanSummary, run_scan

from prguard_cli.runtime import build_forge, exit_on_error

console = Console()
logger = logging.getLogger(__name__)


def _print_summary(summary: ScanSummary) -> None:
    table = Table(title=f"prguard scan of {summary.commit_id[:12]}", show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", width=6)
    table.add_column("Posted", justify="right")
    table.add_column("Already there", justify="right")
    table.add_column("Suppressed", justify="right")
    table.add_column("Outside diff", justify="right")
    table.add_column("Dismissed", justify="right")

    for number in summary.pr_numbers:
        result = summary.results[number]
        suppressed = str(len(result.suppressed))
        if result.suppressed:
            suppressed = f"[yellow]{suppressed}[/yellow]"
        table.add_row(
            f"#{number}",
            str(len(result.posted)),
            str(len(result.already_active)),
            suppressed,
            str(len(result.outside_diff)),
            str(len(summary.dismissed.get(number, []))),
        )

    console.print(table)
    style = "red" if summary.status == "failure" else "green"
    console.print(f"Commit status: [{style}]{summary.status}[/{style}] ({summary.issue_count} issue(s))")
    if summary.approved:
        console.print(f"[green]Approved:[/green] {', '.join(f'#{n}' for n in summary.approved)}")


@click.command("scan")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option("--commit", "commit_id", required=True, help="SHA of the commit that was scanned.")
@click.option(
    "--issues",
    "issues_path",
    required=True,
    type=click.Path(dir_okay=False),
    help="JSON file with the issues the linters reported.",
)
@click.option(
    "--total-max",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum active prguard comments per pull request (0 disables). Overrides config file.",
)
@click.option("--skip-drafts/--no-skip-drafts", default=None, help="Ignore draft pull requests.")
@click.pass_context
@exit_on_error
def scan_cmd(ctx, repo: str, commit_id: str, issues_path: str, total_max: int | None, skip_drafts: bool | None):
    """Post inline comments for ISSUES on every open PR whose head is COMMIT.

    Comments already present are not posted again, reviews whose comments
    have all gone stale are dismissed and a commit status is set.
    """
    config = ctx.obj["config"]
    for key, value in (("review_comments_total_max", total_max), ("skip_draft_prs", skip_drafts)):
        if value is not None:
            config[key] = value

    issues = load_issues(issues_path)
    forge = build_forge(ctx, repo)
    summary = run_scan(forge, commit_id, issues, config)
    _print_summary(summary)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Rate limit after scan: %s", get_rate_limit(forge).get("rate"))
