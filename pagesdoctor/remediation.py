"""Remediation engine: single-file fixes, fix-all and rebuild requests."""

from __future__ import annotations

from typing import List, Optional

from .errors import GitHubError, UnfixableIssueError
from .github.client import GitHubClient
from .logging import get_logger
from .models import FixAllResult, FixResult, RepositoryInfo
from .rules import FIXABLE_ISSUE_IDS, RULES, FixAction, FixTarget
from .validation import ISSUE_ID_REQUIRED, require_text, validate_repository

logger = get_logger("remediation")

DEFAULT_FIX_MESSAGE = "Issue fixed"
REBUILD_MESSAGE = "Rebuild triggered successfully"


class Remediator:
    """Applies hardcoded fixes through the GitHub contents API."""

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    def connect(self, owner: str, repo: str) -> RepositoryInfo:
        """Fetch repository metadata, letting API failures propagate."""
        owner, repo = validate_repository(owner, repo)
        return RepositoryInfo.from_api(self._client.get_repository(owner, repo))

    def fix_issue(self, owner: str, repo: str, issue_id: str) -> FixResult:
        owner, repo = validate_repository(owner, repo)
        issue_id = require_text(issue_id, ISSUE_ID_REQUIRED)
        action = _fix_action(issue_id)

        # The default branch is looked up fresh on every fix.
        repository = RepositoryInfo.from_api(self._client.get_repository(owner, repo))
        target = FixTarget(
            client=self._client, owner=owner, repo=repo, repository=repository
        )
        content = action.render(target)
        if content is None:
            logger.info("Nothing to write for %s on %s/%s", issue_id, owner, repo)
            return FixResult(message=DEFAULT_FIX_MESSAGE)

        self._client.create_or_update_file(
            owner,
            repo,
            action.path,
            content=content,
            message=action.commit_message,
            branch=repository.default_branch,
            sha=self._existing_sha(owner, repo, action.path, repository.default_branch),
        )
        logger.info(
            "Wrote %s to %s/%s@%s", action.path, owner, repo, repository.default_branch
        )
        return FixResult(message=action.success_message)

    def fix_all(self, owner: str, repo: str) -> FixAllResult:
        """Attempt every fixable issue in catalog order, whether or not it was diagnosed."""
        owner, repo = validate_repository(owner, repo)
        fixed: List[str] = []
        for issue_id in FIXABLE_ISSUE_IDS:
            try:
                self.fix_issue(owner, repo, issue_id)
            except Exception as exc:
                logger.warning("Fix %s failed for %s/%s: %s", issue_id, owner, repo, exc)
                continue
            fixed.append(issue_id)
        return FixAllResult(message=f"Fixed {len(fixed)} issues", fixed_issues=fixed)

    def trigger_rebuild(self, owner: str, repo: str) -> FixResult:
        owner, repo = validate_repository(owner, repo)
        self._client.request_pages_build(owner, repo)
        logger.info("Requested Pages build for %s/%s", owner, repo)
        return FixResult(message=REBUILD_MESSAGE)

    def _existing_sha(
        self, owner: str, repo: str, path: str, branch: str
    ) -> Optional[str]:
        try:
            existing = self._client.get_content(owner, repo, path, ref=branch)
        except GitHubError as exc:
            if exc.not_found:
                return None
            raise
        sha = existing.get("sha") if isinstance(existing, dict) else None
        return str(sha) if sha else None


def _fix_action(issue_id: str) -> FixAction:
    rule = RULES.get(issue_id)
    if rule is None or rule.fix is None:
        raise UnfixableIssueError(issue_id)
    return rule.fix


__all__ = ["DEFAULT_FIX_MESSAGE", "REBUILD_MESSAGE", "Remediator"]
