"""Tests for pagesdoctor.diagnostics."""

from __future__ import annotations

import httpx
import pytest

from pagesdoctor.diagnostics import Diagnostician
from pagesdoctor.errors import GitHubError, InvalidInputError
from pagesdoctor.github.client import GitHubClient
from pagesdoctor.models import Severity
from tests._fixtures.fake_github import (
    FakeGitHubClient,
    FakeSiteChecker,
    make_pages,
    make_repository,
)


def _diagnose(github: FakeGitHubClient, site: FakeSiteChecker | None = None):
    checker = site or FakeSiteChecker(reachable=True)
    return Diagnostician(github, checker, clock=lambda: "2024-06-01T00:00:00.000Z").diagnose(
        "acme", "site"
    )


def test_healthy_repository_has_no_issues(healthy_github, site_checker) -> None:
    report = Diagnostician(healthy_github, site_checker).diagnose("acme", "site")

    assert report.issues == []
    assert report.site_reachable is True
    assert report.repository is not None
    assert report.repository.full_name == "acme/site"
    assert report.pages is not None
    assert report.pages.url == "https://acme.github.io/site/"
    assert site_checker.urls == ["https://acme.github.io/site/"]
    assert report.last_checked.endswith("Z")


def test_private_repository_reports_single_private_issue() -> None:
    github = FakeGitHubClient(
        repository=make_repository(private=True), pages=make_pages()
    )

    report = _diagnose(github)

    private = [issue for issue in report.issues if issue.id == "private-repo"]
    assert len(private) == 1
    assert private[0].severity is Severity.CRITICAL
    assert private[0].category == "Configuration"
    assert private[0].can_auto_fix is False


def test_missing_repository_still_runs_later_probes() -> None:
    github = FakeGitHubClient(repository=None, pages=make_pages())

    report = _diagnose(github)

    assert report.repository is None
    assert report.issue_ids()[0] == "repo-not-found"
    assert report.issues[0].category == "Repository"
    assert report.issues[0].description == "Not Found"
    assert report.pages is not None


def test_errored_pages_status_is_reported() -> None:
    github = FakeGitHubClient(
        repository=make_repository(), pages=make_pages(status="errored")
    )

    report = _diagnose(github)

    assert "pages-errored" in report.issue_ids()
    issue = report.issues[report.issue_ids().index("pages-errored")]
    assert issue.category == "Build"
    assert issue.severity is Severity.CRITICAL


def test_unreachable_site_names_the_url() -> None:
    github = FakeGitHubClient(repository=make_repository(), pages=make_pages())

    report = _diagnose(github, FakeSiteChecker(reachable=False))

    assert report.site_reachable is False
    assert report.issue_ids() == ["site-unreachable"]
    assert "https://acme.github.io/site/" in report.issues[0].description
    assert report.issues[0].category == "Accessibility"


def test_pages_without_url_skips_reachability_check() -> None:
    github = FakeGitHubClient(
        repository=make_repository(), pages=make_pages(html_url=None, url=None)
    )
    checker = FakeSiteChecker(reachable=False)

    report = _diagnose(github, checker)

    assert checker.urls == []
    assert report.site_reachable is False
    assert "site-unreachable" not in report.issue_ids()


def test_pages_not_enabled_scenario() -> None:
    github = FakeGitHubClient(repository=make_repository(), pages=None)
    checker = FakeSiteChecker()

    report = _diagnose(github, checker)

    assert report.pages is None
    assert "pages-not-enabled" in report.issue_ids()
    assert report.site_reachable is False
    assert checker.urls == []


def test_pages_probe_soft_fails_on_other_errors() -> None:
    github = FakeGitHubClient(
        repository=make_repository(),
        pages=make_pages(),
        failures={"get_pages": GitHubError("Server Error", status=500)},
    )

    report = _diagnose(github)

    assert report.pages is None
    assert report.issues == []


def test_build_error_message_is_passed_through_verbatim() -> None:
    message = "Page build failed: The tag `foo` on line 3 in `index.md` is not recognized."
    github = FakeGitHubClient(
        repository=make_repository(),
        pages=make_pages(),
        builds=[
            {
                "url": "https://api.github.com/repos/acme/site/pages/builds/1",
                "status": "errored",
                "error": {"message": message},
                "pusher": {"login": "octocat", "avatar_url": "https://example.com/a.png"},
                "commit": "abc123",
                "duration": 1200,
                "created_at": "2024-05-01T12:00:00Z",
                "updated_at": "2024-05-01T12:01:00Z",
            }
        ],
    )

    report = _diagnose(github)

    assert report.issue_ids() == ["build-error"]
    assert report.issues[0].description == message
    assert report.latest_build is not None
    assert report.latest_build.pusher is not None
    assert report.latest_build.pusher.login == "octocat"


def test_build_without_error_message_is_not_an_issue() -> None:
    github = FakeGitHubClient(
        repository=make_repository(),
        pages=make_pages(),
        builds=[{"url": "u", "status": "built", "error": {"message": None}}],
    )

    report = _diagnose(github)

    assert report.issues == []
    assert report.latest_build is not None
    assert report.latest_build.status == "built"


def test_build_listing_failure_is_ignored() -> None:
    github = FakeGitHubClient(
        repository=make_repository(),
        pages=make_pages(),
        failures={"list_pages_builds": GitHubError("Not Found", status=404)},
    )

    report = _diagnose(github)

    assert report.latest_build is None
    assert report.issues == []


@pytest.mark.parametrize("present", ["index.html", "index.md", "README.md"])
def test_any_index_candidate_suppresses_missing_index(present: str) -> None:
    github = FakeGitHubClient(
        repository=make_repository(),
        pages=make_pages(),
        files=[present, "_config.yml"],
    )

    report = _diagnose(github)

    assert "missing-index" not in report.issue_ids()


def test_missing_index_when_no_candidates_exist() -> None:
    github = FakeGitHubClient(
        repository=make_repository(), pages=make_pages(), files=["_config.yml"]
    )

    report = _diagnose(github)

    assert report.issue_ids() == ["missing-index"]
    issue = report.issues[0]
    assert issue.severity is Severity.WARNING
    assert issue.category == "Content"
    assert issue.can_auto_fix is True
    checked = [args[2] for name, args in github.calls if name == "get_content"]
    assert checked[:3] == ["index.html", "index.md", "README.md"]


def test_index_probe_stops_at_first_match() -> None:
    github = FakeGitHubClient(
        repository=make_repository(), pages=make_pages(), files=["index.html", "_config.yml"]
    )

    _diagnose(github)

    checked = [args[2] for name, args in github.calls if name == "get_content"]
    assert "index.md" not in checked
    assert "README.md" not in checked


def test_missing_config_only_flagged_for_legacy_builds() -> None:
    legacy = FakeGitHubClient(
        repository=make_repository(),
        pages=make_pages(build_type="legacy"),
        files=["index.html"],
    )
    workflow = FakeGitHubClient(
        repository=make_repository(),
        pages=make_pages(build_type="workflow"),
        files=["index.html"],
    )

    legacy_report = _diagnose(legacy)
    workflow_report = _diagnose(workflow)

    assert legacy_report.issue_ids() == ["missing-config"]
    assert legacy_report.issues[0].severity is Severity.INFO
    assert legacy_report.issues[0].can_auto_fix is True
    assert workflow_report.issues == []


def test_missing_config_not_flagged_when_pages_unknown() -> None:
    github = FakeGitHubClient(
        repository=make_repository(),
        pages=make_pages(),
        files=["index.html"],
        failures={"get_pages": GitHubError("Bad Gateway", status=502)},
    )

    report = _diagnose(github)

    assert "missing-config" not in report.issue_ids()


def test_missing_cname_file_names_the_domain() -> None:
    github = FakeGitHubClient(
        repository=make_repository(),
        pages=make_pages(cname="www.acme.test"),
    )

    report = _diagnose(github)

    assert report.issue_ids() == ["missing-cname-file"]
    assert "www.acme.test" in report.issues[0].description
    assert report.issues[0].can_auto_fix is True


def test_cname_file_present_suppresses_issue() -> None:
    github = FakeGitHubClient(
        repository=make_repository(),
        pages=make_pages(cname="www.acme.test"),
        files=["index.html", "_config.yml", "CNAME"],
    )

    assert _diagnose(github).issues == []


def test_cname_check_skipped_without_custom_domain() -> None:
    github = FakeGitHubClient(repository=make_repository(), pages=make_pages(cname=None))

    _diagnose(github)

    checked = [args[2] for name, args in github.calls if name == "get_content"]
    assert "CNAME" not in checked


def test_contents_api_outage_does_not_emit_file_issues() -> None:
    github = FakeGitHubClient(
        repository=make_repository(private=True),
        pages=make_pages(cname="www.acme.test"),
        files=[],
        failures={"get_content": GitHubError("Service Unavailable", status=503)},
    )

    report = _diagnose(github)

    assert report.issue_ids() == ["private-repo"]


def test_issues_follow_probe_order_not_severity() -> None:
    github = FakeGitHubClient(
        repository=make_repository(private=True),
        pages=make_pages(status="errored", cname="www.acme.test"),
        files=[],
    )

    report = _diagnose(github, FakeSiteChecker(reachable=False))

    assert report.issue_ids() == [
        "private-repo",
        "pages-errored",
        "site-unreachable",
        "missing-index",
        "missing-config",
        "missing-cname-file",
    ]


def test_invalid_input_fails_before_any_probe() -> None:
    github = FakeGitHubClient(repository=make_repository(), pages=make_pages())

    with pytest.raises(InvalidInputError, match="Owner is required"):
        Diagnostician(github, FakeSiteChecker()).diagnose("", "site")
    with pytest.raises(InvalidInputError, match="Repository name is required"):
        Diagnostician(github, FakeSiteChecker()).diagnose("acme", "   ")

    assert github.calls == []


def test_report_serializes_to_wire_shape() -> None:
    github = FakeGitHubClient(repository=make_repository(), pages=make_pages(), files=[])

    payload = _diagnose(github).to_dict()

    assert set(payload) == {
        "repository",
        "pages",
        "latestBuild",
        "issues",
        "siteReachable",
        "lastChecked",
    }
    assert payload["lastChecked"] == "2024-06-01T00:00:00.000Z"
    assert payload["repository"]["defaultBranch"] == "main"
    assert payload["pages"]["buildType"] == "legacy"
    assert payload["issues"][0] == {
        "id": "missing-index",
        "severity": "warning",
        "category": "Content",
        "title": "Missing Index File",
        "description": "No index.html, index.md, or README.md found in the repository root.",
        "suggestedFix": "Create an index.html or index.md file in the repository root",
        "canAutoFix": True,
    }


def _api_handler(routes):
    """Serve canned ``(status, body)`` pairs by request path; contents are 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path in routes:
            status, body = routes[path]
            if isinstance(body, str):
                return httpx.Response(status, text=body)
            return httpx.Response(status, json=body)
        if "/contents/" in path:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(500, json={"message": f"unexpected {path}"})

    return handler


def _diagnose_over_http(routes, site: FakeSiteChecker | None = None):
    client = GitHubClient(transport=httpx.MockTransport(_api_handler(routes)))
    checker = site or FakeSiteChecker(reachable=True)
    with client:
        return Diagnostician(client, checker).diagnose("acme", "site")


def test_http_pages_disabled_reports_not_enabled_and_missing_index() -> None:
    report = _diagnose_over_http(
        {
            "/repos/acme/site": (200, make_repository()),
            "/repos/acme/site/pages": (404, {"message": "Not Found"}),
            "/repos/acme/site/pages/builds": (200, []),
        }
    )

    assert report.repository is not None
    assert report.repository.full_name == "acme/site"
    assert report.pages is None
    assert report.site_reachable is False
    assert report.issue_ids() == ["pages-not-enabled", "missing-index"]


def test_http_html_pages_body_is_skipped_and_later_checks_run() -> None:
    site = FakeSiteChecker(reachable=True)
    report = _diagnose_over_http(
        {
            "/repos/acme/site": (200, make_repository()),
            "/repos/acme/site/pages": (200, "<html>proxy error</html>"),
            "/repos/acme/site/pages/builds": (200, []),
        },
        site,
    )

    assert report.pages is None
    assert report.site_reachable is False
    assert site.urls == []
    assert report.issue_ids() == ["missing-index"]


def test_http_repository_payload_missing_fields_is_repo_not_found() -> None:
    report = _diagnose_over_http(
        {
            "/repos/acme/site": (200, {"private": False}),
            "/repos/acme/site/pages": (200, make_pages()),
            "/repos/acme/site/pages/builds": (200, []),
        }
    )

    assert report.repository is None
    assert report.issue_ids()[0] == "repo-not-found"
    assert report.issues[0].description.startswith("Could not access the repository")
    assert report.pages is not None


def test_http_non_json_repository_body_is_repo_not_found() -> None:
    report = _diagnose_over_http(
        {
            "/repos/acme/site": (200, "<html>captive portal</html>"),
            "/repos/acme/site/pages": (404, {"message": "Not Found"}),
            "/repos/acme/site/pages/builds": (200, []),
        }
    )

    assert report.repository is None
    assert report.issue_ids() == ["repo-not-found", "pages-not-enabled", "missing-index"]
    assert "non-JSON" in report.issues[0].description


def test_malformed_build_payload_is_skipped() -> None:
    github = FakeGitHubClient(
        repository=make_repository(), pages=make_pages(), builds=["oops"]  # type: ignore[list-item]
    )

    report = _diagnose(github)

    assert report.latest_build is None
    assert report.repository is not None
