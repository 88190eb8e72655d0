"""Error hierarchy and process exit statuses.

Collaborators return None for recoverable conditions; anything unrecoverable
raises one of these. The CLI maps each to its exit status after logging the
attached context, so a caller never has to parse messages.
"""

from __future__ import annotations

from prguard_core.messages import GITHUB_ERROR_STR

EXIT_NORMAL = 0
EXIT_INTERNAL_ERROR = 220
EXIT_COMMIT_NOT_PART_OF_PR = 230
EXIT_SYSTEM_PROBLEM = 251
EXIT_GITHUB_PROBLEM = 252
EXIT_USAGE_ERROR = 253


class PrGuardError(Exception):
    exit_code: int = EXIT_INTERNAL_ERROR

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    @property
    def user_message(self) -> str:
        """Text shown to a human reading the CI output."""
        return self.message


class ForgeError(PrGuardError):
    """The forge API could not be talked to, or answered with an error."""

    exit_code = EXIT_GITHUB_PROBLEM

    def __init__(self, message: str, status: int | None = None, data=None, context: dict | None = None):
        super().__init__(message, context)
        self.status = status
        self.data = data

    @property
    def user_message(self) -> str:
        return GITHUB_ERROR_STR


class ForgeNotFoundError(ForgeError):
    pass


class ForgeDataError(ForgeError):
    """A response did not have the shape the API documents."""


class CommitNotFoundError(ForgeError):
    """The commit handed to us does not exist in the repository."""

    @property
    def user_message(self) -> str:
        return self.message


class CommitNotInPullRequestError(PrGuardError):
    exit_code = EXIT_COMMIT_NOT_PART_OF_PR


class SystemProblemError(PrGuardError):
    """Local environment failure: unreadable input, unwritable temp file."""

    exit_code = EXIT_SYSTEM_PROBLEM


class IssueFormatError(PrGuardError):
    exit_code = EXIT_USAGE_ERROR
