from __future__ import annotations

import pytest

from tests._fixtures.fake_github import (
    FakeGitHubClient,
    FakeSiteChecker,
    make_pages,
    make_repository,
)


@pytest.fixture
def healthy_github() -> FakeGitHubClient:
    """A public, Pages-enabled repository with an index file and Jekyll config."""
    return FakeGitHubClient(repository=make_repository(), pages=make_pages())


@pytest.fixture
def site_checker() -> FakeSiteChecker:
    return FakeSiteChecker(reachable=True)
