"""Input checks performed before any remote call is made."""

from __future__ import annotations

from typing import Any, Tuple

from .errors import InvalidInputError

OWNER_REQUIRED = "Owner is required"
REPO_REQUIRED = "Repository name is required"
ISSUE_ID_REQUIRED = "Issue ID is required"


def require_text(value: Any, message: str) -> str:
    """Return ``value`` stripped, raising InvalidInputError when empty or not a string."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(message)
    return value.strip()


def validate_repository(owner: Any, repo: Any) -> Tuple[str, str]:
    return require_text(owner, OWNER_REQUIRED), require_text(repo, REPO_REQUIRED)


__all__ = [
    "ISSUE_ID_REQUIRED",
    "OWNER_REQUIRED",
    "REPO_REQUIRED",
    "require_text",
    "validate_repository",
]
