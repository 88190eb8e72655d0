"""Pull request reads: discovery, diffs, comments, reviews, labels, events."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from prguard_core.filters import CommentFilter, EventFilter, ReviewFilter, apply_filter
from prguard_core.gh.models import (
    GenericComment,
    IssueEvent,
    Label,
    PrFile,
    PullRequest,
    Review,
    ReviewComment,
    comment_key,
)
from prguard_core.retry import RetryPolicy

if TYPE_CHECKING:
    from prguard_core.gh.forge import Forge

logger = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# PR discovery                                                                #
# --------------------------------------------------------------------------- #


def find_open_prs_for_commit(
    forge: Forge,
    commit_id: str,
    branches_ignore: Iterable[str] = (),
    skip_drafts: bool = False,
    skip_cache: bool = False,
) -> dict[int, PullRequest]:
    """Return open PRs whose head is commit_id, keyed by PR number.

    PRs from branches in branches_ignore never count. Drafts are dropped after
    the cached lookup so the cached value serves both settings.
    """
    ignored = sorted(set(branches_ignore))

    def _load() -> dict[int, PullRequest]:
        found: dict[int, PullRequest] = {}
        raw = forge.paginate(forge.repo_path("pulls"), {"state": "open"}, pause=forge.page_policy.wait)
        for item in raw:
            head = item.get("head") if isinstance(item, dict) else None
            if not isinstance(head, dict) or "ref" not in head:
                continue
            if head["ref"] in ignored:
                continue
            if head.get("sha") == commit_id:
                pr = PullRequest.from_api(item)
                found[pr.number] = pr
        return found

    prs = forge.cached(
        "find_open_prs_for_commit",
        (commit_id, ignored),
        _load,
        f"Fetching open pull requests for commit {commit_id[:12]} from GitHub",
        skip_cache=skip_cache,
    )

    if skip_drafts:
        prs = {number: pr for number, pr in prs.items() if not pr.draft}
    return dict(prs)


def find_open_prs_with_retries(
    forge: Forge,
    commit_id: str,
    branches_ignore: Iterable[str] = (),
    skip_drafts: bool = False,
    policy: RetryPolicy | None = None,
) -> dict[int, PullRequest]:
    """find_open_prs_for_commit, retried while nothing is found.

    Right after a push the forge may not list the PR yet. Every retry waits
    according to policy and bypasses the cache.
    """
    policy = policy or forge.discovery_policy
    attempts = max(1, policy.max_attempts)
    prs: dict[int, PullRequest] = {}

    for attempt in range(1, attempts + 1):
        if attempt > 1:
            logger.info("No pull request found for commit %s, retrying (attempt %d/%d)", commit_id, attempt, attempts)
            policy.wait(attempt)
        prs = find_open_prs_for_commit(forge, commit_id, branches_ignore, skip_drafts, skip_cache=attempt > 1)
        if prs:
            break

    return prs


def get_pr_files(forge: Forge, pr_number: int) -> list[PrFile]:
    return forge.cached(
        "get_pr_files",
        (pr_number,),
        lambda: [PrFile.from_api(f) for f in forge.paginate(forge.repo_path("pulls", pr_number, "files"))],
        f"Fetching changed files of pull request #{pr_number}",
    )


def get_pr_commits(forge: Forge, pr_number: int) -> list[str]:
    """SHAs of every commit in the pull request, oldest first."""

    def _load() -> list[str]:
        shas = []
        for item in forge.paginate(forge.repo_path("pulls", pr_number, "commits")):
            if isinstance(item, dict) and isinstance(item.get("sha"), str):
                shas.append(item["sha"])
        return shas

    return forge.cached("get_pr_commits", (pr_number,), _load, f"Fetching commits of pull request #{pr_number}")


# --------------------------------------------------------------------------- #
# Review comments                                                             #
# --------------------------------------------------------------------------- #


def get_review_comments(
    forge: Forge,
    pr_number: int,
    spec: CommentFilter | None = None,
    skip_cache: bool = False,
) -> list[ReviewComment]:
    """Inline review comments of a pull request, narrowed by spec.

    The filter is part of the cache key, so differently filtered calls never
    share an entry.
    """
    spec = forge.resolve(spec or CommentFilter())

    def _load() -> list[ReviewComment]:
        raw = forge.paginate(forge.repo_path("pulls", pr_number, "comments"))
        return apply_filter((ReviewComment.from_api(c) for c in raw), spec)

    return list(
        forge.cached(
            "get_review_comments",
            (pr_number, spec),
            _load,
            f"Fetching review comments submitted to pull request #{pr_number}",
            skip_cache=skip_cache,
        )
    )


def index_commit_review_comments(forge: Forge, commit_id: str, since: str) -> dict[str, list[ReviewComment]]:
    """Active review comments made on commit_id since a timestamp, keyed "path:position".

    Uses the repository-wide listing, which the forge sometimes fails to serve
    for particular pages; those pages are skipped and partial results returned.
    """

    def _load() -> list[ReviewComment]:
        raw = forge.paginate(
            forge.repo_path("pulls", "comments"),
            {"sort": "created", "direction": "asc", "since": since},
            tolerate_failures=True,
        )
        return [ReviewComment.from_api(c) for c in raw]

    comments = forge.cached(
        "index_commit_review_comments",
        (since,),
        _load,
        f"Fetching pull request review comments made since {since}",
    )

    index: dict[str, list[ReviewComment]] = {}
    for comment in comments:
        if not comment.is_active or comment.original_commit_id != commit_id:
            continue
        index.setdefault(comment_key(comment.path, comment.position), []).append(comment)
    return index


# --------------------------------------------------------------------------- #
# Generic comments, reviews, labels, events                                   #
# --------------------------------------------------------------------------- #


def get_generic_comments(forge: Forge, pr_number: int, skip_cache: bool = False) -> list[GenericComment]:
    return list(
        forge.cached(
            "get_generic_comments",
            (pr_number,),
            lambda: [GenericComment.from_api(c) for c in forge.paginate(forge.repo_path("issues", pr_number, "comments"))],
            f"Fetching generic comments of pull request #{pr_number}",
            skip_cache=skip_cache,
        )
    )


def get_reviews(
    forge: Forge,
    pr_number: int,
    spec: ReviewFilter | None = None,
    skip_cache: bool = False,
) -> list[Review]:
    """Reviews submitted to a pull request, narrowed by author and/or state."""
    reviews = forge.cached(
        "get_reviews",
        (pr_number,),
        lambda: [Review.from_api(r) for r in forge.paginate(forge.repo_path("pulls", pr_number, "reviews"))],
        f"Fetching reviews for pull request #{pr_number}",
        skip_cache=skip_cache,
    )
    return apply_filter(reviews, forge.resolve(spec or ReviewFilter()))


def get_labels(forge: Forge, pr_number: int, skip_cache: bool = False) -> list[Label]:
    def _load() -> list[Label]:
        data = forge.client.fetch(forge.repo_path("issues", pr_number, "labels"))
        return [Label.from_api(item) for item in data or []]

    return list(
        forge.cached(
            "get_labels",
            (pr_number,),
            _load,
            f"Getting labels associated with pull request #{pr_number}",
            skip_cache=skip_cache,
        )
    )


def find_label(forge: Forge, pr_number: int, name: str, skip_cache: bool = False) -> Label | None:
    for label in get_labels(forge, pr_number, skip_cache=skip_cache):
        if label.name == name:
            return label
    return None


def get_review_events(
    forge: Forge,
    pr_number: int,
    spec: EventFilter | None = None,
    review_ids_only: bool = False,
) -> list:
    """Issue events of a pull request, optionally narrowed.

    With review_ids_only, returns the ids of dismissed reviews carried by the
    remaining events instead of the events.
    """
    events = forge.cached(
        "get_review_events",
        (pr_number,),
        lambda: [
            IssueEvent.from_api(e)
            for e in forge.paginate(forge.repo_path("issues", pr_number, "events"), tolerate_failures=True)
        ],
        f"Getting issue events for pull request #{pr_number}",
    )
    if spec is not None:
        events = apply_filter(events, spec)
    if review_ids_only:
        return [e.dismissed_review_id for e in events if e.dismissed_review_id is not None]
    return list(events)
