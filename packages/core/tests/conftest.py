"""Shared fixtures: an in-memory forge that serves pages and records every call."""

from __future__ import annotations

import pytest

from prguard_cache.memory import MemoryCache
from prguard_core.errors import ForgeError, ForgeNotFoundError
from prguard_core.gh.forge import Forge
from prguard_core.retry import NO_WAIT

BOT = "prguard-bot"
REPO = "/repos/acme/widgets"


class FakeClient:
    """Stands in for ForgeClient.

    - collections: path -> list, served in pages from the page/per_page params
    - objects: path -> value returned as-is by fetch
    - failing_pages: {(path, page)} answered with a forge error
    - on_post: path -> callable(fields) run when that path is posted to
    """

    def __init__(self, login: str = BOT):
        self.collections: dict[str, list] = {}
        self.objects: dict[str, object] = {"/user": {"login": login, "id": 1}}
        self.failing_pages: set[tuple[str, int]] = set()
        self.on_post: dict = {}
        self.calls: list[tuple] = []
        self._next_id = 1000

    def fetch(self, path, params=None, fail_fatal=True):
        params = dict(params or {})
        self.calls.append(("GET", path, params))
        page = params.get("page", 1)
        if (path, page) in self.failing_pages:
            if fail_fatal:
                raise ForgeError(f"GET {path} failed", status=500)
            return None
        if path in self.objects:
            return self.objects[path]
        if path in self.collections:
            per_page = params.get("per_page", 100)
            items = self.collections[path]
            return items[(page - 1) * per_page : page * per_page]
        if fail_fatal:
            raise ForgeNotFoundError(f"GET {path}: not found", status=404)
        return None

    def post(self, path, fields=None):
        self.calls.append(("POST", path, fields))
        self._next_id += 1
        hook = self.on_post.get(path)
        if hook is not None:
            hook(fields, self._next_id)
        return {"id": self._next_id}

    def put(self, path, fields=None):
        self.calls.append(("PUT", path, fields))
        return {}

    def delete(self, path):
        self.calls.append(("DELETE", path))
        # A deleted comment no longer shows up in any listing.
        item_id = path.rsplit("/", 1)[-1]
        if item_id.isdigit():
            for key, items in self.collections.items():
                self.collections[key] = [i for i in items if not (isinstance(i, dict) and i.get("id") == int(item_id))]
        return None

    def close(self):
        pass

    def requests(self, verb, path=None):
        return [c for c in self.calls if c[0] == verb and (path is None or c[1] == path)]


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def forge(client):
    return Forge(
        client=client,
        owner="acme",
        name="widgets",
        cache=MemoryCache(),
        page_policy=NO_WAIT,
        discovery_policy=NO_WAIT,
    )
