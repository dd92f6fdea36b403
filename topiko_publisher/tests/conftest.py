"""Shared fixtures for the test suite."""

from __future__ import annotations

from typing import Iterator

import pytest

from topiko_publisher.services.github import GitHubRepositoryClient
from topiko_publisher.settings import Settings
from topiko_publisher.tests.fakes import SHARED_SECRET, FakeGitHub


@pytest.fixture()
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture()
def settings(fake_github: FakeGitHub) -> Settings:
    """Settings pointing at the fake repository."""

    return Settings(
        github_owner=fake_github.owner,
        github_repo=fake_github.repo,
        github_token="ghp_test",
        shared_secret=SHARED_SECRET,
    )


@pytest.fixture()
def github_client(fake_github: FakeGitHub, settings: Settings) -> Iterator[GitHubRepositoryClient]:
    client = GitHubRepositoryClient.from_settings(settings, transport=fake_github.transport)
    yield client
    client.close()
