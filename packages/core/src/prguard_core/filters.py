"""Predicate-based narrowing of forge object lists.

Dimensions combine with AND; the allowed values within one dimension combine
with OR. Every function returns a new list in the original order and leaves
its inputs alone.

Filter specs are frozen dataclasses so they can be part of a cache key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Sequence

from prguard_core.utils.paths import NON_CODE_EXTENSIONS, file_extension, in_folder

Predicate = Callable[[Any], bool]


class CurrentUser:
    """Stands for "whoever owns the token"; resolved before filtering."""

    _instance: CurrentUser | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MYSELF"


MYSELF = CurrentUser()

Login = str | CurrentUser


def filter_items(items: Iterable, *predicates: Predicate) -> list:
    return [item for item in items if all(p(item) for p in predicates)]


def apply_filter(items: Iterable, spec) -> list:
    return filter_items(items, *spec.predicates())


def _resolved(login: Login | None) -> str | None:
    if isinstance(login, CurrentUser):
        raise ValueError("Login filter still refers to the token holder; resolve it first")
    return login


# --------------------------------------------------------------------------- #
# Predicate builders                                                          #
# --------------------------------------------------------------------------- #


def by_author(login: str) -> Predicate:
    return lambda item: item.author == login


def by_state(states: Iterable) -> Predicate:
    allowed = frozenset(states)
    return lambda item: item.state in allowed


def by_active(active: bool) -> Predicate:
    return lambda item: item.is_active == active


def by_event_type(event_type: str) -> Predicate:
    return lambda item: item.event == event_type


def by_actor_logins(logins: Iterable[str]) -> Predicate:
    allowed = frozenset(logins)
    return lambda item: item.actor_login in allowed


def by_actor_ids(ids: Iterable[int]) -> Predicate:
    allowed = frozenset(ids)
    return lambda item: item.actor_id in allowed


def by_permissions(admin: bool | None = None, push: bool | None = None, pull: bool | None = None) -> Predicate:
    wanted = {k: v for k, v in (("admin", admin), ("push", push), ("pull", pull)) if v is not None}

    def _matches(item) -> bool:
        return all(getattr(item.permissions, k) == bool(v) for k, v in wanted.items())

    return _matches


# --------------------------------------------------------------------------- #
# Filter specs                                                                #
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class CommentFilter:
    login: Login | None = None
    active: bool | None = None

    def predicates(self) -> list[Predicate]:
        preds = []
        login = _resolved(self.login)
        if login:
            preds.append(by_author(login))
        if self.active is not None:
            preds.append(by_active(self.active))
        return preds


@dataclass(frozen=True)
class ReviewFilter:
    login: Login | None = None
    states: frozenset = frozenset()

    def predicates(self) -> list[Predicate]:
        preds = []
        login = _resolved(self.login)
        if login:
            preds.append(by_author(login))
        if self.states:
            preds.append(by_state(self.states))
        return preds


@dataclass(frozen=True)
class EventFilter:
    event_type: str | None = None
    actor_logins: frozenset = frozenset()
    actor_ids: frozenset = frozenset()

    def predicates(self) -> list[Predicate]:
        preds = []
        if self.event_type:
            preds.append(by_event_type(self.event_type))
        if self.actor_logins:
            preds.append(by_actor_logins(self.actor_logins))
        if self.actor_ids:
            preds.append(by_actor_ids(self.actor_ids))
        return preds


@dataclass(frozen=True)
class PermissionFilter:
    admin: bool | None = None
    push: bool | None = None
    pull: bool | None = None

    def predicates(self) -> list[Predicate]:
        if self.admin is None and self.push is None and self.pull is None:
            return []
        return [by_permissions(self.admin, self.push, self.pull)]


def filter_repo_collaborators(collaborators: Sequence, spec: PermissionFilter | dict) -> list:
    """Keep collaborators whose admin/push/pull flags equal the ones given."""
    if isinstance(spec, dict):
        spec = PermissionFilter(**spec)
    return apply_filter(collaborators, spec)


@dataclass(frozen=True)
class PathFilter:
    """Decide which file paths are worth reporting on.

    - extensions: allow-list; empty means every extension not denied
    - exclude_extensions: deny-list, binary and asset files by default
    - skip_folders: directories, matched from the repository root
    """

    extensions: frozenset = frozenset()
    exclude_extensions: frozenset = field(default=NON_CODE_EXTENSIONS)
    skip_folders: tuple = ()

    @classmethod
    def from_config(cls, config: dict) -> PathFilter:
        return cls(
            extensions=frozenset(e.lower().lstrip(".") for e in config.get("file_extensions") or []),
            skip_folders=tuple(config.get("skip_folders") or []),
        )

    def matches(self, path: str) -> bool:
        ext = file_extension(path)
        if self.extensions and ext not in self.extensions:
            return False
        if ext in self.exclude_extensions:
            return False
        return not any(in_folder(path, folder) for folder in self.skip_folders)

    def predicates(self, attr: str = "filename") -> list[Predicate]:
        return [lambda item: self.matches(getattr(item, attr))]
