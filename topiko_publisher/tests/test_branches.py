from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from topiko_publisher.errors import BaseBranchNotFound, UpstreamLookupError, UpstreamWriteError
from topiko_publisher.models.publishing import BranchRef
from topiko_publisher.services.branches import BranchResolver
from topiko_publisher.services.github import GitHubAPIError


@dataclass(slots=True)
class StubRefs:
    """Branch store recording lookups and creations."""

    heads: dict[str, str] = field(default_factory=dict)
    lookups: list[str] = field(default_factory=list)
    created: list[tuple[str, str]] = field(default_factory=list)
    lookup_error: GitHubAPIError | None = None
    create_error: GitHubAPIError | None = None

    def get_ref(self, branch: str) -> BranchRef | None:
        self.lookups.append(branch)
        if self.lookup_error is not None:
            raise self.lookup_error
        sha = self.heads.get(branch)
        return BranchRef(name=branch, head_commit_sha=sha) if sha else None

    def create_ref(self, branch: str, sha: str) -> BranchRef:
        if self.create_error is not None:
            raise self.create_error
        self.created.append((branch, sha))
        self.heads[branch] = sha
        return BranchRef(name=branch, head_commit_sha=sha)


def test_existing_branch_is_returned_without_creation() -> None:
    refs = StubRefs(heads={"main": "m1", "preview-acme": "p1"})

    branch = BranchResolver(refs).ensure_branch("preview-acme", "main")

    assert branch == BranchRef(name="preview-acme", head_commit_sha="p1")
    assert refs.lookups == ["preview-acme"]
    assert refs.created == []


def test_missing_branch_is_created_from_default_head() -> None:
    refs = StubRefs(heads={"main": "m1"})

    branch = BranchResolver(refs).ensure_branch("preview-acme", "main")

    assert branch == BranchRef(name="preview-acme", head_commit_sha="m1")
    assert refs.lookups == ["preview-acme", "main"]
    assert refs.created == [("preview-acme", "m1")]


def test_missing_default_branch_is_reported() -> None:
    refs = StubRefs(heads={})

    with pytest.raises(BaseBranchNotFound, match="main branch not found"):
        BranchResolver(refs).ensure_branch("preview-acme", "main")

    assert refs.created == []


def test_lookup_failures_surface_as_upstream_lookup_errors() -> None:
    refs = StubRefs(lookup_error=GitHubAPIError("GitHub API error: 502", status_code=502))

    with pytest.raises(UpstreamLookupError) as excinfo:
        BranchResolver(refs).ensure_branch("preview-acme", "main")

    assert excinfo.value.upstream_status == 502
    assert excinfo.value.details == "GitHub API error: 502"


def test_creation_conflicts_are_not_retried() -> None:
    refs = StubRefs(
        heads={"main": "m1"},
        create_error=GitHubAPIError("Failed to create branch: 422", status_code=422),
    )

    with pytest.raises(UpstreamWriteError, match="Failed to create branch: 422"):
        BranchResolver(refs).ensure_branch("preview-acme", "main")

    assert refs.lookups == ["preview-acme", "main"]
