"""Diagnostic engine: runs the ordered probe sequence and assembles a report."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Callable, List, Optional, Protocol, Sequence

from .errors import GitHubError
from .github.client import GitHubClient
from .logging import get_logger
from .models import BuildInfo, DiagnosticReport, Issue, PagesInfo, RepositoryInfo
from .rules import RULES
from .validation import validate_repository

logger = get_logger("diagnostics")

INDEX_CANDIDATES = ("index.html", "index.md", "README.md")
JEKYLL_CONFIG_PATH = "_config.yml"
CNAME_PATH = "CNAME"
LEGACY_BUILD_TYPE = "legacy"

# Raised by the `from_api` constructors when a payload lacks or mistypes a field.
MALFORMED_PAYLOAD_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


class Reachability(Protocol):
    def is_reachable(self, url: str) -> bool: ...


@dataclass
class ProbeContext:
    """State shared across one diagnostic pass.

    Probes read earlier results from here (the config and CNAME probes depend
    on what the Pages probe found) and record their own findings on it.
    """

    owner: str
    repo: str
    client: GitHubClient
    site_checker: Reachability
    repository: Optional[RepositoryInfo] = None
    pages: Optional[PagesInfo] = None
    latest_build: Optional[BuildInfo] = None
    site_reachable: bool = False
    issues: List[Issue] = field(default_factory=list)


Probe = Callable[[ProbeContext], List[Issue]]


def probe_repository(ctx: ProbeContext) -> List[Issue]:
    try:
        payload = ctx.client.get_repository(ctx.owner, ctx.repo)
        repository = RepositoryInfo.from_api(payload)
    except GitHubError as exc:
        return [RULES["repo-not-found"].issue(description=str(exc))]
    except MALFORMED_PAYLOAD_ERRORS as exc:
        logger.debug(
            "Unusable repository payload for %s/%s: %r", ctx.owner, ctx.repo, exc
        )
        return [RULES["repo-not-found"].issue()]
    ctx.repository = repository
    if ctx.repository.private:
        return [RULES["private-repo"].issue()]
    return []


def probe_pages(ctx: ProbeContext) -> List[Issue]:
    try:
        payload = ctx.client.get_pages(ctx.owner, ctx.repo)
    except GitHubError as exc:
        if exc.not_found:
            return [RULES["pages-not-enabled"].issue()]
        raise

    ctx.pages = PagesInfo.from_api(payload)
    issues: List[Issue] = []
    if ctx.pages.status == "errored":
        issues.append(RULES["pages-errored"].issue())

    if ctx.pages.url:
        ctx.site_reachable = ctx.site_checker.is_reachable(ctx.pages.url)
        if not ctx.site_reachable:
            issues.append(RULES["site-unreachable"].issue(url=ctx.pages.url))
    return issues


def probe_latest_build(ctx: ProbeContext) -> List[Issue]:
    builds = ctx.client.list_pages_builds(ctx.owner, ctx.repo, per_page=1)
    if not builds:
        return []
    ctx.latest_build = BuildInfo.from_api(builds[0])
    if ctx.latest_build.error_message:
        return [RULES["build-error"].issue(description=ctx.latest_build.error_message)]
    return []


def probe_index_file(ctx: ProbeContext) -> List[Issue]:
    for path in INDEX_CANDIDATES:
        if ctx.client.file_exists(ctx.owner, ctx.repo, path):
            return []
    return [RULES["missing-index"].issue()]


def probe_jekyll_config(ctx: ProbeContext) -> List[Issue]:
    if ctx.client.file_exists(ctx.owner, ctx.repo, JEKYLL_CONFIG_PATH):
        return []
    if ctx.pages is not None and ctx.pages.build_type == LEGACY_BUILD_TYPE:
        return [RULES["missing-config"].issue()]
    return []


def probe_cname_file(ctx: ProbeContext) -> List[Issue]:
    if ctx.pages is None or not ctx.pages.cname:
        return []
    if ctx.client.file_exists(ctx.owner, ctx.repo, CNAME_PATH):
        return []
    return [RULES["missing-cname-file"].issue(domain=ctx.pages.cname)]


DEFAULT_PROBES: Sequence[Probe] = (
    probe_repository,
    probe_pages,
    probe_latest_build,
    probe_index_file,
    probe_jekyll_config,
    probe_cname_file,
)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Diagnostician:
    """Runs the probe sequence against one repository."""

    def __init__(
        self,
        client: GitHubClient,
        site_checker: Reachability,
        *,
        probes: Sequence[Probe] = DEFAULT_PROBES,
        clock: Callable[[], str] = _now_iso,
    ) -> None:
        self._client = client
        self._site_checker = site_checker
        self._probes = tuple(probes)
        self._clock = clock

    def diagnose(self, owner: str, repo: str) -> DiagnosticReport:
        owner, repo = validate_repository(owner, repo)
        ctx = ProbeContext(
            owner=owner,
            repo=repo,
            client=self._client,
            site_checker=self._site_checker,
        )
        logger.info("Diagnosing %s/%s", owner, repo)

        for probe in self._probes:
            try:
                found = probe(ctx)
            except (GitHubError, *MALFORMED_PAYLOAD_ERRORS) as exc:
                # A failing probe contributes no issues; later probes still run.
                name = getattr(probe, "__name__", repr(probe))
                logger.debug("Probe %s failed for %s/%s: %r", name, owner, repo, exc)
                continue
            ctx.issues.extend(found)

        report = DiagnosticReport(
            repository=ctx.repository,
            pages=ctx.pages,
            latest_build=ctx.latest_build,
            issues=ctx.issues,
            site_reachable=ctx.site_reachable,
            last_checked=self._clock(),
        )
        logger.info(
            "Diagnosed %s/%s: %d issue(s), site reachable=%s",
            owner,
            repo,
            len(report.issues),
            report.site_reachable,
        )
        return report


__all__ = [
    "DEFAULT_PROBES",
    "Diagnostician",
    "INDEX_CANDIDATES",
    "Probe",
    "ProbeContext",
    "probe_cname_file",
    "probe_index_file",
    "probe_jekyll_config",
    "probe_latest_build",
    "probe_pages",
    "probe_repository",
]
