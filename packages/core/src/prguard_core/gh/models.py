"""Typed records for forge API payloads.

Payloads are decoded into these at the API boundary. A missing required key
or a value of the wrong type raises ForgeDataError straight away instead of
letting a loosely-typed dict leak further in.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from prguard_core.errors import ForgeDataError


def _require(data: Any, key: str, kind: type | tuple[type, ...]) -> Any:
    if not isinstance(data, dict):
        raise ForgeDataError(f"Expected an object, got {type(data).__name__}", data=data)
    if key not in data:
        raise ForgeDataError(f"Missing required field {key!r}", data=data)
    value = data[key]
    # bool is an int subclass; never accept it where a number is expected.
    if isinstance(value, bool) and bool not in (kind if isinstance(kind, tuple) else (kind,)):
        raise ForgeDataError(f"Field {key!r} has unexpected type bool", data=data)
    if not isinstance(value, kind):
        raise ForgeDataError(f"Field {key!r} has unexpected type {type(value).__name__}", data=data)
    return value


def _optional(data: dict, key: str, kind: type | tuple[type, ...], default: Any = None) -> Any:
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, kind) or (isinstance(value, bool) and kind is int):
        raise ForgeDataError(f"Field {key!r} has unexpected type {type(value).__name__}", data=data)
    return value


def _login(data: dict, key: str = "user") -> str:
    return _require(_require(data, key, dict), "login", str)


class ReviewState(str, Enum):
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    APPROVED = "APPROVED"
    DISMISSED = "DISMISSED"
    PENDING = "PENDING"


@dataclass(frozen=True)
class Anchored:
    """The comment still points at a line of the current diff."""

    position: int


@dataclass(frozen=True)
class Obsolete:
    """The diff line the comment pointed at is gone."""


OBSOLETE = Obsolete()

Anchor = Anchored | Obsolete


@dataclass(frozen=True)
class User:
    login: str
    id: int

    @classmethod
    def from_api(cls, data: dict) -> User:
        return cls(login=_require(data, "login", str), id=_require(data, "id", int))


@dataclass(frozen=True)
class PullRequest:
    number: int
    head_sha: str
    head_ref: str
    draft: bool = False
    base_sha: str | None = None
    title: str = ""

    @classmethod
    def from_api(cls, data: dict) -> PullRequest:
        head = _require(data, "head", dict)
        base = data.get("base") or {}
        number = _require(data, "number", (int, str))
        try:
            number = int(number)
        except ValueError as e:
            raise ForgeDataError(f"Pull request number {number!r} is not an integer", data=data) from e
        return cls(
            number=number,
            head_sha=_require(head, "sha", str),
            head_ref=_require(head, "ref", str),
            draft=bool(data.get("draft", False)),
            base_sha=base.get("sha") if isinstance(base, dict) else None,
            title=_optional(data, "title", str, ""),
        )


def comment_key(path: str, position: int | None) -> str:
    """Index key for an inline comment: "path:position"."""
    return f"{path}:{position}"


@dataclass(frozen=True)
class ReviewComment:
    id: int
    path: str
    anchor: Anchor
    body: str
    author: str
    review_id: int | None = None
    original_commit_id: str | None = None
    commit_id: str | None = None

    @property
    def is_active(self) -> bool:
        return isinstance(self.anchor, Anchored)

    @property
    def position(self) -> int | None:
        return self.anchor.position if isinstance(self.anchor, Anchored) else None

    @classmethod
    def from_api(cls, data: dict) -> ReviewComment:
        position = _optional(data, "position", int)
        return cls(
            id=_require(data, "id", int),
            path=_require(data, "path", str),
            anchor=Anchored(position) if position is not None else OBSOLETE,
            body=_optional(data, "body", str, ""),
            author=_login(data),
            review_id=_optional(data, "pull_request_review_id", int),
            original_commit_id=_optional(data, "original_commit_id", str),
            commit_id=_optional(data, "commit_id", str),
        )


@dataclass(frozen=True)
class Review:
    id: int
    author: str
    state: ReviewState
    commit_id: str | None = None
    body: str = ""

    @classmethod
    def from_api(cls, data: dict) -> Review:
        state = _require(data, "state", str)
        try:
            review_state = ReviewState(state)
        except ValueError as e:
            raise ForgeDataError(f"Unknown review state {state!r}", data=data) from e
        return cls(
            id=_require(data, "id", int),
            author=_login(data),
            state=review_state,
            commit_id=_optional(data, "commit_id", str),
            body=_optional(data, "body", str, ""),
        )


@dataclass(frozen=True)
class GenericComment:
    id: int
    body: str
    author: str

    @classmethod
    def from_api(cls, data: dict) -> GenericComment:
        return cls(id=_require(data, "id", int), body=_optional(data, "body", str, ""), author=_login(data))


@dataclass(frozen=True)
class Label:
    name: str

    @classmethod
    def from_api(cls, data: dict) -> Label:
        return cls(name=_require(data, "name", str))


@dataclass(frozen=True)
class Permissions:
    admin: bool = False
    push: bool = False
    pull: bool = False

    @classmethod
    def from_api(cls, data: dict | None) -> Permissions:
        data = data or {}
        return cls(admin=bool(data.get("admin")), push=bool(data.get("push")), pull=bool(data.get("pull")))


@dataclass(frozen=True)
class Collaborator:
    login: str
    id: int
    permissions: Permissions

    @classmethod
    def from_api(cls, data: dict) -> Collaborator:
        return cls(
            login=_require(data, "login", str),
            id=_require(data, "id", int),
            permissions=Permissions.from_api(data.get("permissions")),
        )


@dataclass(frozen=True)
class Team:
    id: int
    slug: str
    name: str = ""

    @classmethod
    def from_api(cls, data: dict) -> Team:
        return cls(id=_require(data, "id", int), slug=_require(data, "slug", str), name=_optional(data, "name", str, ""))


@dataclass(frozen=True)
class IssueEvent:
    id: int
    event: str
    actor_login: str | None = None
    actor_id: int | None = None
    dismissed_review_id: int | None = None

    @classmethod
    def from_api(cls, data: dict) -> IssueEvent:
        actor = data.get("actor") or {}
        dismissed = data.get("dismissed_review") or {}
        return cls(
            id=_require(data, "id", int),
            event=_require(data, "event", str),
            actor_login=actor.get("login"),
            actor_id=actor.get("id"),
            dismissed_review_id=dismissed.get("review_id"),
        )


@dataclass(frozen=True)
class PrFile:
    filename: str
    status: str
    patch: str = ""
    previous_filename: str | None = None
    additions: int = 0
    deletions: int = 0
    changes: int = 0

    @classmethod
    def from_api(cls, data: dict) -> PrFile:
        return cls(
            filename=_require(data, "filename", str),
            status=_require(data, "status", str),
            patch=_optional(data, "patch", str, ""),
            previous_filename=_optional(data, "previous_filename", str),
            additions=_optional(data, "additions", int, 0),
            deletions=_optional(data, "deletions", int, 0),
            changes=_optional(data, "changes", int, 0),
        )


@dataclass(frozen=True)
class CommitInfo:
    sha: str
    files: tuple[PrFile, ...] = ()

    @classmethod
    def from_api(cls, data: dict) -> CommitInfo:
        files = data.get("files") or []
        if not isinstance(files, list):
            raise ForgeDataError("Field 'files' is not a list", data=data)
        return cls(sha=_require(data, "sha", str), files=tuple(PrFile.from_api(f) for f in files))
