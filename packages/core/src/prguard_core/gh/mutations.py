"""Forge writes. Each is one HTTP call (labels check first); errors propagate."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prguard_core.gh.pull_request import find_label
from prguard_core.messages import strip_chatops_markers

if TYPE_CHECKING:
    from prguard_core.gh.forge import Forge

logger = logging.getLogger(__name__)

COMMIT_STATES = ("error", "failure", "pending", "success")


def submit_review(
    forge: Forge,
    pr_number: int,
    commit_id: str,
    body: str,
    event: str,
    comments: list[dict] | None = None,
) -> int | None:
    """Create a review; comments are {"path", "position", "body"} dicts. Returns the review id."""
    logger.info(
        "Submitting %s review with %d inline comment(s) to pull request #%d",
        event,
        len(comments or []),
        pr_number,
    )
    response = forge.client.post(
        forge.repo_path("pulls", pr_number, "reviews"),
        {
            "commit_id": commit_id,
            "body": strip_chatops_markers(body),
            "event": event,
            "comments": comments or [],
        },
    )
    return response.get("id") if isinstance(response, dict) else None


def delete_review_comment(forge: Forge, comment_id: int) -> None:
    logger.info("Deleting inline comment %d from a pull request review", comment_id)
    forge.client.delete(forge.repo_path("pulls", "comments", comment_id))


def submit_generic_comment(forge: Forge, pr_number: int, message: str, commit_id: str | None = None) -> None:
    body = strip_chatops_markers(message)
    if commit_id:
        body += f" (commit-ID: {commit_id})."
    logger.info("Posting a comment to pull request #%d", pr_number)
    forge.client.post(forge.repo_path("issues", pr_number, "comments"), {"body": body})


def delete_generic_comment(forge: Forge, comment_id: int) -> None:
    logger.debug("Removing generic comment %d", comment_id)
    forge.client.delete(forge.repo_path("issues", "comments", comment_id))


def dismiss_review(forge: Forge, pr_number: int, review_id: int, message: str) -> None:
    logger.info("Dismissing review %d on pull request #%d", review_id, pr_number)
    forge.client.put(
        forge.repo_path("pulls", pr_number, "reviews", review_id, "dismissals"),
        {"message": message},
    )


def add_label(forge: Forge, pr_number: int, name: str) -> bool:
    """Attach a label unless already there. Returns True if a request was made."""
    if find_label(forge, pr_number, name, skip_cache=True) is not None:
        logger.debug("Label %r already on pull request #%d", name, pr_number)
        return False
    logger.info("Adding label %r to pull request #%d", name, pr_number)
    forge.client.post(forge.repo_path("issues", pr_number, "labels"), {"labels": [name]})
    return True


def remove_label(forge: Forge, pr_number: int, name: str) -> bool:
    """Detach a label if present. Returns True if a request was made."""
    if find_label(forge, pr_number, name, skip_cache=True) is None:
        return False
    logger.info("Removing label %r from pull request #%d", name, pr_number)
    forge.client.delete(forge.repo_path("issues", pr_number, "labels", name))
    return True


def set_commit_status(
    forge: Forge,
    commit_id: str,
    state: str,
    description: str,
    context: str,
    target_url: str | None = None,
) -> None:
    if state not in COMMIT_STATES:
        raise ValueError(f"Unknown commit state {state!r}. Choose one of {', '.join(COMMIT_STATES)}.")
    fields = {"state": state, "description": description, "context": context}
    if target_url:
        fields["target_url"] = target_url
    logger.info("Setting commit status %r (%s) for %s", state, context, commit_id)
    forge.client.post(forge.repo_path("statuses", commit_id), fields)
