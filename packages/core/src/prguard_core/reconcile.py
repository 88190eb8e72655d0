"""Review comment reconciliation.

Given the issues found on a commit and what is already on the pull request,
decide what to post, what to leave alone and what to retract:

- one inline comment per distinct issue, never a second copy of an active one
- no more than review_comments_total_max active comments from us per PR
- a CHANGES_REQUESTED review is dismissed only once every one of its comments
  is obsolete
- informational generic comments are matched by marker text and only ever
  deleted when we authored them

None of this is atomic against the forge. The duplicate check is the only
defence against overlapping runs, and it is best-effort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Mapping, Sequence

from prguard_core.filters import MYSELF, CommentFilter, ReviewFilter
from prguard_core.gh.models import Anchored, PullRequest, ReviewComment, ReviewState, comment_key
from prguard_core.gh.mutations import (
    delete_generic_comment,
    dismiss_review,
    submit_generic_comment,
    submit_review,
)
from prguard_core.gh.pull_request import (
    find_open_prs_for_commit,
    get_generic_comments,
    get_pr_files,
    get_review_comments,
    get_reviews,
)
from prguard_core.issues import IssueRecord, filter_duplicate_issues, format_comment_body, normalize_comment_body
from prguard_core.messages import DEFAULT_APPROVE_MSG, DISMISS_REVIEW_MSG, REVIEW_COMMENTS_TOTAL_MAX
from prguard_core.utils.diff import get_diff_positions

if TYPE_CHECKING:
    from prguard_core.gh.forge import Forge

logger = logging.getLogger(__name__)

DEFAULT_TOTAL_MAX = 200
DEFAULT_REVIEW_COMMENTS_MAX = 10


class CommentState(str, Enum):
    NOT_YET_POSTED = "not_yet_posted"
    POSTED_THIS_RUN = "posted_this_run"
    ALREADY_ACTIVE = "already_active"
    SUPPRESSED_BY_CEILING = "suppressed_by_ceiling"


@dataclass
class DesiredComment:
    issue: IssueRecord
    path: str
    position: int
    body: str
    state: CommentState = CommentState.NOT_YET_POSTED

    @property
    def key(self) -> str:
        return comment_key(self.path, self.position)

    def as_api_comment(self) -> dict:
        return {"path": self.path, "position": self.position, "body": self.body}


@dataclass
class ReconcileResult:
    pr_number: int
    posted: list[DesiredComment] = field(default_factory=list)
    suppressed: list[DesiredComment] = field(default_factory=list)
    already_active: list[DesiredComment] = field(default_factory=list)
    outside_diff: list[IssueRecord] = field(default_factory=list)
    review_ids: list[int] = field(default_factory=list)

    @property
    def ceiling_reached(self) -> bool:
        return bool(self.suppressed)


def build_comment_index(comments: Iterable[ReviewComment]) -> dict[str, list[ReviewComment]]:
    """Active comments keyed "path:position"; one key may hold several comments."""
    index: dict[str, list[ReviewComment]] = {}
    for comment in comments:
        if not comment.is_active:
            continue
        index.setdefault(comment_key(comment.path, comment.position), []).append(comment)
    return index


def _is_duplicate(desired: DesiredComment, existing: Sequence[ReviewComment]) -> bool:
    wanted = normalize_comment_body(desired.body)
    return any(normalize_comment_body(c.body) == wanted for c in existing)


def _review_event(batch: Sequence[DesiredComment]) -> str:
    if any(c.issue.is_error for c in batch):
        return "REQUEST_CHANGES"
    return "COMMENT"


def _review_body(batch: Sequence[DesiredComment], commit_id: str) -> str:
    errors = sum(1 for c in batch if c.issue.is_error)
    warnings = len(batch) - errors
    parts = []
    if errors:
        parts.append(f"{errors} error(s)")
    if warnings:
        parts.append(f"{warnings} warning(s)")
    return f"Scanning commit {commit_id} found {' and '.join(parts)}."


def diff_positions_for_pr(forge: Forge, pr: PullRequest) -> dict[str, dict[int, int]]:
    """file name -> {new-file line: diff position} for every file in the PR."""
    return {f.filename: get_diff_positions(f.patch) for f in get_pr_files(forge, pr.number) if f.patch}


def reconcile_issue_comments(
    forge: Forge,
    pr: PullRequest,
    issues: Iterable[IssueRecord],
    total_max: int | None = DEFAULT_TOTAL_MAX,
    review_comments_max: int = DEFAULT_REVIEW_COMMENTS_MAX,
    diff_positions: Mapping[str, Mapping[int, int]] | None = None,
) -> ReconcileResult:
    """Post inline comments for issues not already commented on.

    Existing comments are re-read, bypassing the cache, so a repeated call
    sees what the previous one posted. total_max counts our own active
    comments on the PR; None or 0 disables the ceiling.
    """
    result = ReconcileResult(pr_number=pr.number)
    if diff_positions is None:
        diff_positions = diff_positions_for_pr(forge, pr)

    desired: list[DesiredComment] = []
    for issue in filter_duplicate_issues(issues):
        position = diff_positions.get(issue.file_name, {}).get(issue.line)
        if position is None:
            logger.debug("Skipping issue at %s:%d (not in diff)", issue.file_name, issue.line)
            result.outside_diff.append(issue)
            continue
        desired.append(DesiredComment(issue, issue.file_name, position, format_comment_body(issue)))

    if not desired:
        logger.info("No inline comments to reconcile for pull request #%d", pr.number)
        return result

    me = forge.current_login()
    active = get_review_comments(forge, pr.number, CommentFilter(active=True), skip_cache=True)
    index = build_comment_index(active)
    total = sum(1 for c in active if c.author == me)

    to_post: list[DesiredComment] = []
    queued: dict[str, list[ReviewComment]] = {}
    for item in desired:
        if _is_duplicate(item, index.get(item.key, [])) or _is_duplicate(item, queued.get(item.key, [])):
            item.state = CommentState.ALREADY_ACTIVE
            result.already_active.append(item)
            continue

        if total_max and total >= total_max:
            item.state = CommentState.SUPPRESSED_BY_CEILING
            result.suppressed.append(item)
            continue

        to_post.append(item)
        total += 1
        # Stand-in so a later identical issue in this run counts as a duplicate.
        queued.setdefault(item.key, []).append(
            ReviewComment(id=0, path=item.path, anchor=Anchored(item.position), body=item.body, author=me)
        )

    batch_size = max(1, review_comments_max)
    for start in range(0, len(to_post), batch_size):
        batch = to_post[start : start + batch_size]
        review_id = submit_review(
            forge,
            pr.number,
            pr.head_sha,
            _review_body(batch, pr.head_sha),
            _review_event(batch),
            [c.as_api_comment() for c in batch],
        )
        for item in batch:
            item.state = CommentState.POSTED_THIS_RUN
        result.posted.extend(batch)
        if review_id is not None:
            result.review_ids.append(review_id)

    if result.suppressed:
        logger.warning(
            "Pull request #%d reached the limit of %d active comments; %d comment(s) not posted",
            pr.number,
            total_max,
            len(result.suppressed),
        )
    logger.info(
        "Pull request #%d: %d posted, %d already present, %d suppressed, %d outside the diff",
        pr.number,
        len(result.posted),
        len(result.already_active),
        len(result.suppressed),
        len(result.outside_diff),
    )
    return result


def dismiss_reviews_with_no_active_comments(forge: Forge, pr_number: int) -> list[int]:
    """Dismiss our CHANGES_REQUESTED reviews whose comments are all obsolete.

    A review with no comments at all is never dismissed. If no comments come
    back from the forge nothing is dismissed either: that looks exactly like a
    failed fetch. Returns the dismissed review ids.
    """
    logger.info("Dismissing reviews by us on pull request #%d with no active comments left", pr_number)

    reviews = get_reviews(forge, pr_number, ReviewFilter(login=MYSELF, states=frozenset({ReviewState.CHANGES_REQUESTED})))
    comments = get_review_comments(forge, pr_number, CommentFilter(login=MYSELF), skip_cache=True)

    if not comments:
        logger.info("Not dismissing any reviews on pull request #%d: no comments by us were found", pr_number)
        return []

    # review id -> dismissible. An active comment is a permanent veto.
    reviews_status: dict[int, bool] = {}
    for comment in comments:
        if comment.review_id is None:
            continue
        if comment.is_active:
            reviews_status[comment.review_id] = False
        elif reviews_status.get(comment.review_id) is not False:
            reviews_status[comment.review_id] = True

    dismissed = []
    for review in reviews:
        if reviews_status.get(review.id) is True:
            dismiss_review(forge, pr_number, review.id, DISMISS_REVIEW_MSG)
            dismissed.append(review.id)
    return dismissed


def post_total_comments_ceiling_warning(
    forge: Forge,
    prs_with_suppressed: Mapping[int, Sequence],
    commit_id: str | None = None,
) -> list[int]:
    """Post one ceiling warning per PR that had comments suppressed.

    A PR that already carries our warning is left alone. Returns the PR
    numbers a warning was posted to.
    """
    me = forge.current_login()
    posted = []
    for pr_number, suppressed in prs_with_suppressed.items():
        if not suppressed:
            continue
        existing = get_generic_comments(forge, pr_number, skip_cache=True)
        if any(c.author == me and REVIEW_COMMENTS_TOTAL_MAX in c.body for c in existing):
            logger.info("Pull request #%d already has the comment limit warning", pr_number)
            continue
        submit_generic_comment(forge, pr_number, REVIEW_COMMENTS_TOTAL_MAX, commit_id)
        posted.append(pr_number)
    return posted


def cleanup_bot_comments(
    forge: Forge,
    commit_id: str,
    markers: Iterable[str],
    branches_ignore: Iterable[str] = (),
    skip_drafts: bool = False,
) -> int:
    """Delete our generic comments containing any marker, on every PR for commit_id.

    The account may be shared with other tools, so a comment must both be
    ours and contain a known marker. Returns how many were deleted.
    """
    markers = [m for m in markers if m]
    logger.info("Cleaning up generic comments for commit %s (%d marker(s))", commit_id, len(markers))
    if not markers:
        return 0

    me = forge.current_login()
    deleted = 0
    for pr_number in find_open_prs_for_commit(forge, commit_id, branches_ignore, skip_drafts):
        for comment in get_generic_comments(forge, pr_number):
            if comment.author != me:
                continue
            if any(marker in comment.body for marker in markers):
                delete_generic_comment(forge, comment.id)
                deleted += 1
    return deleted


def approve_pr(forge: Forge, pr_number: int, commit_id: str, message: str = DEFAULT_APPROVE_MSG) -> int | None:
    """Submit an APPROVE review pinned to commit_id.

    The PR head is not re-checked after approving: if a commit landed in
    between, the approval covers code that was never scanned.
    """
    logger.info("Approving pull request #%d at commit %s", pr_number, commit_id)
    return submit_review(forge, pr_number, commit_id, message, "APPROVE")
