"""CLI entrypoints for pagesdoctor commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from .config import ConfigError, PagesDoctorConfig, load_config
from .diagnostics import Diagnostician
from .errors import GitHubError, InvalidInputError, UnfixableIssueError
from .github.client import GitHubClient
from .logging import configure_logging
from .models import DiagnosticReport
from .reachability import SiteChecker
from .remediation import Remediator

_SEVERITY_MARKERS = {"critical": "[!]", "warning": "[~]", "info": "[i]"}


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_repository_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("owner", help="Repository owner (user or organization).")
    parser.add_argument("repo", help="Repository name.")


def _add_json_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw JSON response instead of a summary.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pagesdoctor",
        description="Diagnose and repair GitHub Pages deployments.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("."),
        help="Path to .pagesdoctor.yml or the directory containing it.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log records (with timestamps) to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    connect_parser = subparsers.add_parser(
        "connect", help="Check that a repository can be accessed."
    )
    _add_verbose_option(connect_parser, suppress_default=True)
    _add_repository_arguments(connect_parser)
    _add_json_option(connect_parser)

    diagnose_parser = subparsers.add_parser(
        "diagnose", help="Run every probe and list detected issues."
    )
    _add_verbose_option(diagnose_parser, suppress_default=True)
    _add_repository_arguments(diagnose_parser)
    _add_json_option(diagnose_parser)

    fix_parser = subparsers.add_parser("fix", help="Apply the fix for one issue id.")
    _add_verbose_option(fix_parser, suppress_default=True)
    _add_repository_arguments(fix_parser)
    fix_parser.add_argument("issue_id", help="Issue id reported by `diagnose`.")

    fix_all_parser = subparsers.add_parser(
        "fix-all", help="Attempt every auto-fix regardless of current diagnosis."
    )
    _add_verbose_option(fix_all_parser, suppress_default=True)
    _add_repository_arguments(fix_all_parser)

    rebuild_parser = subparsers.add_parser(
        "rebuild", help="Request a new GitHub Pages build."
    )
    _add_verbose_option(rebuild_parser, suppress_default=True)
    _add_repository_arguments(rebuild_parser)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default=None, help="Bind address.")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for pagesdoctor commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "serve":
        from .service import run_service

        run_service(config, host=args.host, port=args.port)
        return

    try:
        _dispatch(args, config)
    except (InvalidInputError, UnfixableIssueError) as exc:
        parser.exit(2, f"{exc}\n")
    except GitHubError as exc:
        parser.exit(1, f"pagesdoctor {args.command} failed: {exc}\n")


def _dispatch(args: argparse.Namespace, config: PagesDoctorConfig) -> None:
    with GitHubClient.from_config(config.github) as client:
        remediator = Remediator(client)
        if args.command == "connect":
            repository = remediator.connect(args.owner, args.repo)
            if args.json:
                _print_json({"success": True, "repository": repository.to_dict()})
            else:
                print(f"Connected to {repository.full_name} ({repository.html_url})")
                print(f"  Default branch: {repository.default_branch}")
                print(f"  Visibility: {'private' if repository.private else 'public'}")
        elif args.command == "diagnose":
            site_checker = SiteChecker(timeout=config.site.timeout)
            try:
                report = Diagnostician(client, site_checker).diagnose(
                    args.owner, args.repo
                )
            finally:
                site_checker.close()
            if args.json:
                _print_json(report.to_dict())
            else:
                _print_report(args.owner, args.repo, report)
        elif args.command == "fix":
            print(remediator.fix_issue(args.owner, args.repo, args.issue_id).message)
        elif args.command == "fix-all":
            result = remediator.fix_all(args.owner, args.repo)
            print(result.message)
            for issue_id in result.fixed_issues:
                print(f"  fixed: {issue_id}")
        elif args.command == "rebuild":
            print(remediator.trigger_rebuild(args.owner, args.repo).message)
        else:  # pragma: no cover - argparse enforces choices
            raise InvalidInputError("Unknown command")


def _print_json(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2))


def _print_report(owner: str, repo: str, report: DiagnosticReport) -> None:
    print(f"Diagnostics for {owner}/{repo} (checked {report.last_checked})")
    if report.pages is not None and report.pages.url:
        state = "reachable" if report.site_reachable else "unreachable"
        print(f"  Site: {report.pages.url} ({state})")
    if not report.issues:
        print("No issues found.")
        return
    for issue in report.issues:
        marker = _SEVERITY_MARKERS.get(issue.severity.value, "[?]")
        fixable = " (auto-fixable)" if issue.can_auto_fix else ""
        print(f"{marker} {issue.id}: {issue.title}{fixable}")
        print(f"    {issue.description}")
        if issue.suggested_fix:
            print(f"    Suggested fix: {issue.suggested_fix}")


if __name__ == "__main__":
    main(sys.argv[1:])
