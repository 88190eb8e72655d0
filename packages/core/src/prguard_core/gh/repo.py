"""Repository and organisation level reads."""

from __future__ import annotations

import logging
from dataclasses import replace
from urllib.parse import quote
from typing import TYPE_CHECKING, Iterable

from prguard_core.errors import CommitNotFoundError, ForgeNotFoundError
from prguard_core.filters import PathFilter, PermissionFilter, filter_repo_collaborators
from prguard_core.gh.models import Collaborator, CommitInfo, Team, User

if TYPE_CHECKING:
    from prguard_core.gh.forge import Forge

logger = logging.getLogger(__name__)


def get_commit_info(
    forge: Forge,
    commit_id: str,
    path_filter: PathFilter | None = None,
    statuses: Iterable[str] | None = None,
) -> CommitInfo:
    """Commit details, with its file list optionally narrowed by path and status."""

    def _load() -> CommitInfo:
        try:
            data = forge.client.fetch(forge.repo_path("commits", commit_id))
        except ForgeNotFoundError as e:
            raise CommitNotFoundError(
                "Unable to fetch commit-info from GitHub, the commit does not exist.",
                status=e.status,
                data=e.data,
                context={"repo": forge.full_name, "commit_id": commit_id},
            ) from e
        return CommitInfo.from_api(data)

    info = forge.cached("get_commit_info", (commit_id,), _load, f"Fetching commit info for {commit_id[:12]}")

    files = info.files
    if path_filter is not None:
        files = tuple(f for f in files if path_filter.matches(f.filename))
    if statuses is not None:
        allowed = set(statuses)
        kept = []
        for f in files:
            if f.status not in allowed:
                logger.debug("Skipping %s: status %s not in %s", f.filename, f.status, sorted(allowed))
                continue
            kept.append(f)
        files = tuple(kept)
    return replace(info, files=files)


def get_collaborators(
    forge: Forge,
    affiliation: str = "all",
    spec: PermissionFilter | None = None,
) -> list[Collaborator]:
    collaborators = forge.cached(
        "get_collaborators",
        (affiliation,),
        lambda: [
            Collaborator.from_api(c)
            for c in forge.paginate(forge.repo_path("collaborators"), {"affiliation": affiliation})
        ],
        f"Getting {affiliation} collaborators for repository {forge.full_name}",
    )
    return filter_repo_collaborators(collaborators, spec or PermissionFilter())


def get_org_teams(forge: Forge, org: str, slug: str | None = None) -> list[Team]:
    teams = forge.cached(
        "get_org_teams",
        (org,),
        lambda: [Team.from_api(t) for t in forge.paginate(f"/orgs/{quote(org, safe='')}/teams")],
        f"Getting teams of organization {org}",
    )
    if slug:
        return [t for t in teams if t.slug == slug]
    return list(teams)


def get_team_members(forge: Forge, org: str, team_slug: str) -> list[User]:
    path = f"/orgs/{quote(org, safe='')}/teams/{quote(team_slug, safe='')}/members"
    return list(
        forge.cached(
            "get_team_members",
            (org, team_slug),
            lambda: [User.from_api(u) for u in forge.paginate(path)],
            f"Getting members of team {org}/{team_slug}",
        )
    )


def get_team_member_ids(forge: Forge, org: str, team_slugs: Iterable[str]) -> list[int]:
    """Ids of everyone in any of the teams, first-seen order, no repeats."""
    ids: list[int] = []
    seen: set[int] = set()
    for slug in team_slugs:
        for member in get_team_members(forge, org, slug):
            if member.id not in seen:
                seen.add(member.id)
                ids.append(member.id)
    return ids


def get_rate_limit(forge: Forge) -> dict:
    """Current API rate-limit usage. Never cached."""
    data = forge.client.fetch("/rate_limit", fail_fatal=False)
    return data if isinstance(data, dict) else {}
