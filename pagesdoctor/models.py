"""Core data models shared across pagesdoctor components.

Each model is built from a GitHub REST payload via ``from_api`` and rendered
to the camelCase JSON shape served by the HTTP API via ``to_dict``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


@dataclass
class RepositoryInfo:
    """Identity and metadata of a source repository."""

    id: int
    name: str
    full_name: str
    description: Optional[str]
    private: bool
    html_url: str
    default_branch: str
    pushed_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "RepositoryInfo":
        return cls(
            id=int(payload["id"]),
            name=str(payload["name"]),
            full_name=str(payload["full_name"]),
            description=payload.get("description"),
            private=bool(payload.get("private", False)),
            html_url=str(payload.get("html_url") or ""),
            default_branch=str(payload.get("default_branch") or "main"),
            pushed_at=payload.get("pushed_at"),
            updated_at=payload.get("updated_at"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "fullName": self.full_name,
            "description": self.description,
            "private": self.private,
            "htmlUrl": self.html_url,
            "defaultBranch": self.default_branch,
            "pushedAt": self.pushed_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class HttpsCertificate:
    state: str
    description: str


@dataclass
class PagesSource:
    branch: str
    path: str


@dataclass
class PagesInfo:
    """Hosting configuration reported by the Pages endpoint."""

    url: Optional[str]
    status: Optional[str]
    cname: Optional[str]
    custom_404: bool = False
    https_certificate: Optional[HttpsCertificate] = None
    source: Optional[PagesSource] = None
    build_type: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "PagesInfo":
        certificate = payload.get("https_certificate")
        source = payload.get("source")
        return cls(
            url=payload.get("html_url") or payload.get("url") or None,
            status=payload.get("status") or None,
            cname=payload.get("cname") or None,
            custom_404=bool(payload.get("custom_404") or False),
            https_certificate=(
                HttpsCertificate(
                    state=str(certificate.get("state", "")),
                    description=str(certificate.get("description", "")),
                )
                if isinstance(certificate, Mapping)
                else None
            ),
            source=(
                PagesSource(
                    branch=str(source.get("branch", "")),
                    path=str(source.get("path", "")),
                )
                if isinstance(source, Mapping)
                else None
            ),
            build_type=payload.get("build_type"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "status": self.status,
            "cname": self.cname,
            "custom404": self.custom_404,
            "httpsCertificate": (
                {
                    "state": self.https_certificate.state,
                    "description": self.https_certificate.description,
                }
                if self.https_certificate
                else None
            ),
            "source": (
                {"branch": self.source.branch, "path": self.source.path}
                if self.source
                else None
            ),
            "buildType": self.build_type,
        }


@dataclass
class BuildPusher:
    login: str
    avatar_url: str


@dataclass
class BuildInfo:
    """The most recent Pages deployment attempt."""

    url: str
    status: str
    error_message: Optional[str] = None
    has_error: bool = False
    pusher: Optional[BuildPusher] = None
    commit: Optional[str] = None
    duration: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "BuildInfo":
        error = payload.get("error")
        pusher = payload.get("pusher")
        return cls(
            url=str(payload.get("url") or ""),
            status=str(payload.get("status") or ""),
            error_message=error.get("message") if isinstance(error, Mapping) else None,
            has_error=isinstance(error, Mapping),
            pusher=(
                BuildPusher(
                    login=str(pusher.get("login", "")),
                    avatar_url=str(pusher.get("avatar_url", "")),
                )
                if isinstance(pusher, Mapping)
                else None
            ),
            commit=payload.get("commit"),
            duration=payload.get("duration"),
            created_at=str(payload.get("created_at") or ""),
            updated_at=str(payload.get("updated_at") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "status": self.status,
            "error": {"message": self.error_message} if self.has_error else None,
            "pusher": (
                {"login": self.pusher.login, "avatarUrl": self.pusher.avatar_url}
                if self.pusher
                else None
            ),
            "commit": self.commit,
            "duration": self.duration,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class Issue:
    """A single detected problem."""

    id: str
    severity: Severity
    category: str
    title: str
    description: str
    suggested_fix: Optional[str]
    can_auto_fix: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "severity": self.severity.value,
            "category": self.category,
            "title": self.title,
            "description": self.description,
            "suggestedFix": self.suggested_fix,
            "canAutoFix": self.can_auto_fix,
        }


@dataclass
class DiagnosticReport:
    """Aggregate result of one diagnostic pass."""

    repository: Optional[RepositoryInfo]
    pages: Optional[PagesInfo]
    latest_build: Optional[BuildInfo]
    issues: List[Issue]
    site_reachable: bool
    last_checked: str

    def issue_ids(self) -> List[str]:
        return [issue.id for issue in self.issues]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repository": self.repository.to_dict() if self.repository else None,
            "pages": self.pages.to_dict() if self.pages else None,
            "latestBuild": self.latest_build.to_dict() if self.latest_build else None,
            "issues": [issue.to_dict() for issue in self.issues],
            "siteReachable": self.site_reachable,
            "lastChecked": self.last_checked,
        }


@dataclass
class FixResult:
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "message": self.message}


@dataclass
class FixAllResult:
    message: str
    fixed_issues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "fixedIssues": list(self.fixed_issues),
        }
