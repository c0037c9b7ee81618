"""Tests for the issue rule catalog."""

from __future__ import annotations

from pagesdoctor.models import Severity
from pagesdoctor.rules import FIXABLE_ISSUE_IDS, RULES


def test_fixable_ids_are_closed_and_ordered() -> None:
    assert FIXABLE_ISSUE_IDS == ("missing-index", "missing-config", "missing-cname-file")


def test_only_fixable_rules_report_auto_fix() -> None:
    for rule_id, rule in RULES.items():
        assert rule.issue(url="u", domain="d").can_auto_fix is (rule_id in FIXABLE_ISSUE_IDS)


def test_categories_are_stable() -> None:
    categories = {rule_id: rule.category for rule_id, rule in RULES.items()}
    assert categories == {
        "private-repo": "Configuration",
        "repo-not-found": "Repository",
        "pages-errored": "Build",
        "site-unreachable": "Accessibility",
        "pages-not-enabled": "Configuration",
        "build-error": "Build",
        "missing-index": "Content",
        "missing-config": "Configuration",
        "missing-cname-file": "Configuration",
    }


def test_description_override_is_used_verbatim() -> None:
    issue = RULES["build-error"].issue(description="Liquid error on line {3}")

    assert issue.description == "Liquid error on line {3}"
    assert issue.severity is Severity.CRITICAL
