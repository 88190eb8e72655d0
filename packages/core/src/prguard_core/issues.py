"""Issues reported by the linters, and how they read as review comments."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from prguard_core.errors import IssueFormatError, SystemProblemError

LEVEL_ERROR = "ERROR"
LEVEL_WARNING = "WARNING"
LEVEL_INFO = "INFO"

_LEVEL_EMOJI = {
    LEVEL_ERROR: ":no_entry_sign:",
    LEVEL_WARNING: ":exclamation:",
}

# "<emoji> **Level**: " as written by format_comment_body.
_BODY_PREFIX_RE = re.compile(r"^\s*(?::[a-z0-9_+-]+:\s*)?(?:\*\*[A-Za-z]+\*\*:\s*)?")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class IssueRecord:
    file_name: str
    line: int
    message: str
    level: str = LEVEL_WARNING
    source: str = ""
    type: str = ""

    @property
    def key(self) -> tuple[str, int, str, str]:
        return (self.file_name, self.line, self.message, self.source)

    @property
    def is_error(self) -> bool:
        return self.level == LEVEL_ERROR


def _issue_from_dict(file_name: str, item: dict) -> IssueRecord:
    if not isinstance(item, dict):
        raise IssueFormatError(f"Issue for {file_name} is not an object: {item!r}")
    line = item.get("line")
    message = item.get("message")
    if not isinstance(line, int) or isinstance(line, bool) or line < 1:
        raise IssueFormatError(f"Issue for {file_name} has an invalid line: {line!r}")
    if not isinstance(message, str) or not message.strip():
        raise IssueFormatError(f"Issue for {file_name} line {line} has no message")
    level = str(item.get("level") or item.get("type") or LEVEL_WARNING).upper()
    return IssueRecord(
        file_name=file_name,
        line=line,
        message=message,
        level=level,
        source=str(item.get("source") or ""),
        type=str(item.get("type") or level),
    )


def parse_issues(data) -> list[IssueRecord]:
    """Decode linter output.

    Accepts either {"path/file.php": [{"line": 3, "message": ...}, ...]} or a
    flat list of issues that each carry a "file" key.
    """
    issues: list[IssueRecord] = []
    if isinstance(data, dict):
        for file_name, items in data.items():
            if not isinstance(items, list):
                raise IssueFormatError(f"Issues for {file_name} must be a list")
            issues.extend(_issue_from_dict(file_name, item) for item in items)
    elif isinstance(data, list):
        for item in data:
            file_name = item.get("file") if isinstance(item, dict) else None
            if not isinstance(file_name, str) or not file_name:
                raise IssueFormatError(f"Issue without a file name: {item!r}")
            issues.append(_issue_from_dict(file_name, item))
    else:
        raise IssueFormatError("Issues must be a JSON object or array")
    return issues


def load_issues(path: str) -> list[IssueRecord]:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise SystemProblemError(f"Could not read issues file {path}: {e}", context={"path": path}) from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise IssueFormatError(f"Issues file {path} is not valid JSON: {e}", context={"path": path}) from e
    return parse_issues(data)


def filter_duplicate_issues(issues: Iterable[IssueRecord]) -> list[IssueRecord]:
    """Keep the first issue per (file, line, message, source)."""
    seen: set[tuple] = set()
    unique = []
    for issue in issues:
        if issue.key in seen:
            continue
        seen.add(issue.key)
        unique.append(issue)
    return unique


def format_comment_body(issue: IssueRecord) -> str:
    emoji = _LEVEL_EMOJI.get(issue.level, "")
    label = f"**{issue.level.title()}**: "
    return f"{emoji} {label}{issue.message}" if emoji else f"{label}{issue.message}"


def normalize_comment_body(body: str) -> str:
    """Strip the level prefix and collapse whitespace, for duplicate detection."""
    return _WHITESPACE_RE.sub(" ", _BODY_PREFIX_RE.sub("", body or "", count=1)).strip()
