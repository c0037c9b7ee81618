"""Catalog of diagnosable issues and the fix actions attached to them.

The catalog is data: each issue id maps to an :class:`IssueRule` carrying its
severity, category and wording, plus an optional :class:`FixAction`. The
remediation engine only exposes fixes for rules that carry a fix action, and
``fix_all`` walks those rules in catalog order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

from .models import Issue, RepositoryInfo, Severity
from .templates import render_index_html, render_jekyll_config

if TYPE_CHECKING:  # pragma: no cover
    from .github.client import GitHubClient


@dataclass(frozen=True)
class FixTarget:
    """Everything a fix renderer may consult when producing file content."""

    client: "GitHubClient"
    owner: str
    repo: str
    repository: RepositoryInfo


@dataclass(frozen=True)
class FixAction:
    """A single-file write that remediates one issue."""

    path: str
    commit_message: str
    success_message: str
    # Returns the file content, or None when there is nothing to write.
    render: Callable[[FixTarget], Optional[str]]


@dataclass(frozen=True)
class IssueRule:
    id: str
    severity: Severity
    category: str
    title: str
    description: str
    suggested_fix: Optional[str] = None
    fix: Optional[FixAction] = None

    @property
    def can_auto_fix(self) -> bool:
        return self.fix is not None

    def issue(self, *, description: str | None = None, **params: Any) -> Issue:
        """Build an :class:`Issue`, formatting the description template with ``params``."""
        text = description if description else self.description.format(**params)
        return Issue(
            id=self.id,
            severity=self.severity,
            category=self.category,
            title=self.title,
            description=text,
            suggested_fix=self.suggested_fix,
            can_auto_fix=self.can_auto_fix,
        )


def _render_index(target: FixTarget) -> Optional[str]:
    return render_index_html(target.repository.name, target.repository.description)


def _render_config(target: FixTarget) -> Optional[str]:
    return render_jekyll_config(target.repository.name, target.repository.description)


def _render_cname(target: FixTarget) -> Optional[str]:
    pages = target.client.get_pages(target.owner, target.repo)
    return pages.get("cname") or None


_RULES: Tuple[IssueRule, ...] = (
    IssueRule(
        id="private-repo",
        severity=Severity.CRITICAL,
        category="Configuration",
        title="Repository is Private",
        description=(
            "GitHub Pages requires a public repository for free accounts. Consider "
            "making the repository public or upgrading to GitHub Pro."
        ),
        suggested_fix="Change repository visibility to public in GitHub settings",
    ),
    IssueRule(
        id="repo-not-found",
        severity=Severity.CRITICAL,
        category="Repository",
        title="Repository Not Found",
        description=(
            "Could not access the repository. Check if it exists and you have access."
        ),
        suggested_fix="Verify the repository name and your access permissions",
    ),
    IssueRule(
        id="pages-errored",
        severity=Severity.CRITICAL,
        category="Build",
        title="GitHub Pages Build Failed",
        description=(
            "The latest GitHub Pages build has failed. Check the Actions tab for "
            "more details."
        ),
        suggested_fix="Review build logs and fix any syntax or configuration errors",
    ),
    IssueRule(
        id="site-unreachable",
        severity=Severity.CRITICAL,
        category="Accessibility",
        title="Site is Not Reachable",
        description=(
            "The site at {url} is not responding. This could be due to DNS issues, "
            "build failures, or the site being newly deployed."
        ),
        suggested_fix="Wait a few minutes if recently deployed, or check DNS configuration",
    ),
    IssueRule(
        id="pages-not-enabled",
        severity=Severity.CRITICAL,
        category="Configuration",
        title="GitHub Pages Not Enabled",
        description="GitHub Pages is not enabled for this repository.",
        suggested_fix="Enable GitHub Pages in repository settings under Pages section",
    ),
    IssueRule(
        id="build-error",
        severity=Severity.CRITICAL,
        category="Build",
        title="Build Error",
        description="The latest GitHub Pages build reported an error.",
        suggested_fix="Review the error message and fix the underlying issue",
    ),
    IssueRule(
        id="missing-index",
        severity=Severity.WARNING,
        category="Content",
        title="Missing Index File",
        description="No index.html, index.md, or README.md found in the repository root.",
        suggested_fix="Create an index.html or index.md file in the repository root",
        fix=FixAction(
            path="index.html",
            commit_message="Add index.html - Created by GitHub Pages Diagnostic Tool",
            success_message="Created index.html file",
            render=_render_index,
        ),
    ),
    IssueRule(
        id="missing-config",
        severity=Severity.INFO,
        category="Configuration",
        title="No Jekyll Configuration",
        description=(
            "No _config.yml file found. This is optional but recommended for "
            "Jekyll sites."
        ),
        suggested_fix="Create a _config.yml file with your site configuration",
        fix=FixAction(
            path="_config.yml",
            commit_message="Add _config.yml - Created by GitHub Pages Diagnostic Tool",
            success_message="Created _config.yml file",
            render=_render_config,
        ),
    ),
    IssueRule(
        id="missing-cname-file",
        severity=Severity.WARNING,
        category="Configuration",
        title="Missing CNAME File",
        description=(
            "Custom domain {domain} is configured but no CNAME file exists in the "
            "repository."
        ),
        suggested_fix="Create a CNAME file with your custom domain",
        fix=FixAction(
            path="CNAME",
            commit_message="Add CNAME file - Created by GitHub Pages Diagnostic Tool",
            success_message="Created CNAME file",
            render=_render_cname,
        ),
    ),
)

RULES: Dict[str, IssueRule] = {rule.id: rule for rule in _RULES}

FIXABLE_ISSUE_IDS: Tuple[str, ...] = tuple(rule.id for rule in _RULES if rule.fix)


def get_rule(issue_id: str) -> IssueRule:
    return RULES[issue_id]


__all__ = [
    "FIXABLE_ISSUE_IDS",
    "FixAction",
    "FixTarget",
    "IssueRule",
    "RULES",
    "get_rule",
]
