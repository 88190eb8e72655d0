"""Per-repository context shared by every forge read and write."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable
from urllib.parse import quote

from prguard_cache.base import MISS, BaseCache
from prguard_cache.keys import cache_key
from prguard_cache.memory import MemoryCache

from prguard_core.errors import ForgeDataError
from prguard_core.filters import CurrentUser
from prguard_core.gh.models import User
from prguard_core.gh.pagination import PER_PAGE, fetch_all_pages
from prguard_core.messages import cached_suffix
from prguard_core.retry import DISCOVERY_POLICY, PAGE_COURTESY_POLICY, RetryPolicy

logger = logging.getLogger(__name__)


@dataclass
class Forge:
    """Everything needed to talk to one repository: transport, coordinates, cache.

    client is anything with fetch/post/put/delete (see gh.client.ForgeClient).
    """

    client: Any
    owner: str
    name: str
    cache: BaseCache = field(default_factory=MemoryCache)
    page_policy: RetryPolicy = PAGE_COURTESY_POLICY
    discovery_policy: RetryPolicy = DISCOVERY_POLICY

    @classmethod
    def for_repo(cls, client, repo: str, **kwargs) -> Forge:
        owner, sep, name = repo.partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ValueError(f"Repository must be given as owner/name, got {repo!r}")
        return cls(client=client, owner=owner, name=name, **kwargs)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def repo_path(self, *parts) -> str:
        path = f"/repos/{quote(self.owner, safe='')}/{quote(self.name, safe='')}"
        for part in parts:
            path += "/" + quote(str(part), safe="")
        return path

    def cached(
        self,
        operation: str,
        args: tuple,
        loader: Callable[[], Any],
        description: str,
        skip_cache: bool = False,
    ) -> Any:
        """Return the cached result for (operation, repo, *args) or load and store it.

        skip_cache only skips the lookup; the fresh result is still stored.
        """
        key = cache_key(operation, self.owner, self.name, *args)
        hit = MISS if skip_cache else self.cache.get(key)
        logger.info("%s%s", description, cached_suffix(hit is not MISS))
        if hit is not MISS:
            return hit
        return self.cache.set(key, loader())

    def paginate(
        self,
        path: str,
        params: dict | None = None,
        tolerate_failures: bool = False,
        pause: Callable[[int], None] | None = None,
    ) -> list:
        base = dict(params or {})

        def _page(page: int, per_page: int):
            return self.client.fetch(
                path,
                {**base, "page": page, "per_page": per_page},
                fail_fatal=not tolerate_failures,
            )

        return fetch_all_pages(_page, per_page=PER_PAGE, tolerate_failures=tolerate_failures, pause=pause)

    def current_user(self) -> User:
        """The account the token belongs to (the bot identity)."""

        def _load() -> User:
            data = self.client.fetch("/user")
            if not isinstance(data, dict):
                raise ForgeDataError("Unable to get information about the token holder", data=data)
            return User.from_api(data)

        key = cache_key("authenticated_user")
        hit = self.cache.get(key)
        logger.debug("Getting information about the token holder%s", cached_suffix(hit is not MISS))
        if hit is not MISS:
            return hit
        return self.cache.set(key, _load())

    def current_login(self) -> str:
        return self.current_user().login

    def resolve(self, spec):
        """Return spec with a MYSELF login replaced by the token holder's login."""
        if isinstance(getattr(spec, "login", None), CurrentUser):
            return replace(spec, login=self.current_login())
        return spec
