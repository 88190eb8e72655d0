"""Fixed texts posted to the forge or shown to users.

Several of these double as markers: generic comments are recognised as ours by
searching their bodies for one of these strings, so changing a text orphans
comments posted by earlier versions.
"""

from __future__ import annotations

import re

GITHUB_ERROR_STR = "GitHub API communication error. Please contact a human."

REVIEW_COMMENTS_TOTAL_MAX = (
    "Total number of active review comments per pull request has been reached "
    "and some comments might not appear as a result. Please resolve some issues to see more"
)

NO_ISSUES_FOUND_MSG = "No issues were found to report when scanning latest commit"

DISMISS_REVIEW_MSG = "Dismissing review as all inline comments are obsolete by now"

DEFAULT_APPROVE_MSG = "Auto-approved: no issues were found when scanning latest commit"

# Sections wrapped in these are never forwarded to chat-ops channels.
CHATOPS_IGNORE_START = "<!-- prguard-chatops-ignore-start -->"
CHATOPS_IGNORE_END = "<!-- prguard-chatops-ignore-end -->"

# Generic comments removed at the start of every scan. The comment limit
# warning is posted again afterwards while comments are still held back.
INFORMATIONAL_MARKERS = (GITHUB_ERROR_STR, NO_ISSUES_FOUND_MSG, REVIEW_COMMENTS_TOTAL_MAX)

_CHATOPS_SECTION_RE = re.compile(re.escape(CHATOPS_IGNORE_START) + r"(.*?)" + re.escape(CHATOPS_IGNORE_END), re.S)


def strip_chatops_markers(text: str) -> str:
    """Remove the ignore markers, keeping the text between them."""
    text = _CHATOPS_SECTION_RE.sub(lambda m: m.group(1), text)
    return text.replace(CHATOPS_IGNORE_START, "").replace(CHATOPS_IGNORE_END, "")


def chatops_visible_text(text: str) -> str:
    """Drop every ignored section, as a chat-ops forwarder would."""
    return _CHATOPS_SECTION_RE.sub("", text)


def cached_suffix(hit: bool) -> str:
    return " (cached)" if hit else ""
