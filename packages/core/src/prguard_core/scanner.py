"""One scan of one commit: from linter issues to comments, reviews and a commit status."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from prguard_core.errors import CommitNotInPullRequestError
from prguard_core.filters import PathFilter
from prguard_core.gh.mutations import add_label, remove_label, set_commit_status, submit_generic_comment
from prguard_core.gh.pull_request import find_open_prs_with_retries
from prguard_core.issues import IssueRecord, filter_duplicate_issues
from prguard_core.messages import DEFAULT_APPROVE_MSG, INFORMATIONAL_MARKERS, NO_ISSUES_FOUND_MSG
from prguard_core.reconcile import (
    ReconcileResult,
    approve_pr,
    cleanup_bot_comments,
    diff_positions_for_pr,
    dismiss_reviews_with_no_active_comments,
    post_total_comments_ceiling_warning,
    reconcile_issue_comments,
)

if TYPE_CHECKING:
    from prguard_core.gh.forge import Forge

logger = logging.getLogger(__name__)


@dataclass
class ScanSummary:
    commit_id: str
    pr_numbers: list[int] = field(default_factory=list)
    results: dict[int, ReconcileResult] = field(default_factory=dict)
    dismissed: dict[int, list[int]] = field(default_factory=dict)
    warned: list[int] = field(default_factory=list)
    approved: list[int] = field(default_factory=list)
    cleaned_up: int = 0
    issue_count: int = 0
    status: str = "success"

    @property
    def posted(self) -> int:
        return sum(len(r.posted) for r in self.results.values())

    @property
    def suppressed(self) -> int:
        return sum(len(r.suppressed) for r in self.results.values())


def run_scan(forge: Forge, commit_id: str, issues: Iterable[IssueRecord], config: dict) -> ScanSummary:
    """Reconcile the pull requests whose head is commit_id with the issues found on it."""
    branches_ignore = config.get("branches_ignore") or []
    skip_drafts = bool(config.get("skip_draft_prs"))
    summary = ScanSummary(commit_id=commit_id)

    prs = find_open_prs_with_retries(forge, commit_id, branches_ignore, skip_drafts)
    if not prs:
        raise CommitNotInPullRequestError(
            f"Commit {commit_id} is not the head of any open pull request in {forge.full_name}",
            context={"repo": forge.full_name, "commit_id": commit_id},
        )
    summary.pr_numbers = sorted(prs)

    summary.cleaned_up = cleanup_bot_comments(forge, commit_id, INFORMATIONAL_MARKERS, branches_ignore, skip_drafts)

    path_filter = PathFilter.from_config(config)
    relevant = filter_duplicate_issues(i for i in issues if path_filter.matches(i.file_name))
    summary.issue_count = len(relevant)
    logger.info("%d issue(s) left after path filtering for commit %s", len(relevant), commit_id)

    clean_prs = []
    for number in summary.pr_numbers:
        pr = prs[number]
        positions = diff_positions_for_pr(forge, pr)
        in_pr = [i for i in relevant if i.file_name in positions]
        if not in_pr:
            clean_prs.append(number)
        summary.results[number] = reconcile_issue_comments(
            forge,
            pr,
            in_pr,
            total_max=config.get("review_comments_total_max"),
            review_comments_max=config.get("review_comments_max", 10),
            diff_positions=positions,
        )

    summary.warned = post_total_comments_ceiling_warning(
        forge,
        {number: result.suppressed for number, result in summary.results.items()},
        commit_id,
    )

    if config.get("dismiss_stale_reviews", True):
        for number in summary.pr_numbers:
            dismissed = dismiss_reviews_with_no_active_comments(forge, number)
            if dismissed:
                summary.dismissed[number] = dismissed

    if config.get("report_no_issues_found"):
        for number in clean_prs:
            submit_generic_comment(forge, number, NO_ISSUES_FOUND_MSG, commit_id)

    label = config.get("autoapprove_label")
    for number in summary.pr_numbers:
        if config.get("autoapprove") and number in clean_prs:
            approve_pr(forge, number, commit_id, config.get("approve_message") or DEFAULT_APPROVE_MSG)
            summary.approved.append(number)
            if label:
                add_label(forge, number, label)
        elif label:
            remove_label(forge, number, label)

    has_errors = any(i.is_error for i in relevant)
    summary.status = "failure" if has_errors else "success"
    description = f"{len(relevant)} issue(s) found" if relevant else "No issues found"
    set_commit_status(
        forge,
        commit_id,
        summary.status,
        description,
        config.get("status_context") or "prguard",
        config.get("status_target_url"),
    )
    return summary
