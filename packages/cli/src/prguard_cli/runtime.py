"""Glue between click commands and prguard_core: forge construction and exit codes."""

from __future__ import annotations

import functools
import logging

import click

from prguard_core.errors import PrGuardError
from prguard_core.gh.client import ForgeClient
from prguard_core.gh.forge import Forge
from prguard_core.retry import RetryPolicy

from prguard_cli.log import console

logger = logging.getLogger(__name__)


def build_forge(ctx: click.Context, repo: str) -> Forge:
    """Create the Forge for repo from the loaded config; the client closes with ctx."""
    config = ctx.obj["config"]
    token = config.get("github_token")
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set PRGUARD_GITHUB_TOKEN or GITHUB_TOKEN, or run `gh auth login` first."
        )

    client = ForgeClient(token, base_url=config["github_base_url"], timeout=config["http_timeout"])
    ctx.call_on_close(client.close)
    try:
        return Forge.for_repo(
            client,
            repo,
            page_policy=RetryPolicy(max_attempts=1, delay=config["page_delay"]),
            discovery_policy=RetryPolicy(max_attempts=config["pr_lookup_attempts"], delay=config["pr_lookup_delay"]),
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--repo") from e


def exit_on_error(func):
    """Turn a PrGuardError into a message on the console and the error's exit code."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PrGuardError as e:
            logger.error("%s: %s", type(e).__name__, e.message)
            if e.context:
                logger.debug("Error context: %s", e.context)
            console.print(f"[red]{e.user_message}[/red]")
            click.get_current_context().exit(e.exit_code)

    return wrapper
