"""Exception hierarchy shared by the diagnostic and remediation engines."""

from __future__ import annotations

from typing import Optional


class PagesDoctorError(RuntimeError):
    """Base class for expected pagesdoctor failures."""


class InvalidInputError(PagesDoctorError):
    """Raised when owner/repo/issue identifiers fail validation."""


class UnfixableIssueError(PagesDoctorError):
    """Raised when a fix is requested for an issue without a fix action."""

    def __init__(self, issue_id: str) -> None:
        super().__init__("This issue cannot be auto-fixed")
        self.issue_id = issue_id


class GitHubError(PagesDoctorError):
    """Raised when a GitHub API call fails or cannot be completed."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status

    @property
    def not_found(self) -> bool:
        return self.status == 404


__all__ = [
    "GitHubError",
    "InvalidInputError",
    "PagesDoctorError",
    "UnfixableIssueError",
]
