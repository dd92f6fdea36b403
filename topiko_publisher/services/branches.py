"""Resolve the branch a site configuration is committed to."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Protocol

from topiko_publisher.errors import BaseBranchNotFound, UpstreamLookupError, UpstreamWriteError
from topiko_publisher.models.publishing import BranchRef
from topiko_publisher.services.github import GitHubAPIError

LOGGER = logging.getLogger(__name__)


class SupportsBranchRefs(Protocol):
    """Subset of the GitHub client used to inspect and create branches."""

    def get_ref(self, branch: str) -> BranchRef | None:
        """Return the branch head or ``None`` when the branch is missing."""

    def create_ref(self, branch: str, sha: str) -> BranchRef:
        """Create ``branch`` at ``sha``."""


@dataclass(slots=True)
class BranchResolver:
    """Make sure a preview branch exists before files are written to it."""

    client: SupportsBranchRefs

    def ensure_branch(self, branch_name: str, default_branch_name: str) -> BranchRef:
        """Return ``branch_name``, creating it from the default branch head if needed.

        There is no lock around the check-then-create sequence: if two requests
        race to create the same branch GitHub rejects the second and the
        failure is reported as an :class:`UpstreamWriteError`.
        """

        existing = self._lookup(branch_name)
        if existing is not None:
            return existing

        base = self._lookup(default_branch_name)
        if base is None:
            raise BaseBranchNotFound(f"{default_branch_name} branch not found")

        try:
            created = self.client.create_ref(branch_name, base.head_commit_sha)
        except GitHubAPIError as exc:
            raise UpstreamWriteError(str(exc), upstream_status=exc.status_code) from exc

        LOGGER.info(
            "Created branch %s from %s",
            branch_name,
            default_branch_name,
            extra={"event": "branch.created", "sha": base.head_commit_sha},
        )
        return created

    def _lookup(self, branch: str) -> BranchRef | None:
        try:
            return self.client.get_ref(branch)
        except GitHubAPIError as exc:
            raise UpstreamLookupError(str(exc), upstream_status=exc.status_code) from exc


__all__ = ["BranchResolver", "SupportsBranchRefs"]
