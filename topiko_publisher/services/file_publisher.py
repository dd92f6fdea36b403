"""Create-or-update a single file on a branch and report the resulting commit."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
import logging
from typing import Protocol

from topiko_publisher.errors import (
    ProtectedBranchError,
    TokenPermissionError,
    UpstreamLookupError,
    UpstreamWriteError,
)
from topiko_publisher.models.publishing import CommitResult, FileVersionToken
from topiko_publisher.services.github import GitHubAPIError

LOGGER = logging.getLogger(__name__)

PERMISSION_DETAILS = "Token permission error - insufficient repository access"
PROTECTED_BRANCH_DETAILS = "Branch protection prevents direct write to main branch"


class SupportsContents(Protocol):
    """Subset of the GitHub client used to read and write repository files."""

    def get_file_sha(self, path: str, branch: str) -> FileVersionToken | None:
        """Return the current version token of ``path`` or ``None`` if absent."""

    def put_file(
        self,
        path: str,
        *,
        branch: str,
        content: str,
        message: str,
        sha: FileVersionToken | None = None,
    ) -> str:
        """Write ``content`` and return the commit sha."""


def classify_write_failure(error: GitHubAPIError) -> UpstreamWriteError:
    """Map a rejected write onto the most specific error kind available.

    GitHub exposes no dedicated error code for these two 403 cases, so the
    match runs on the ``message`` field of the JSON error body and then on the
    raw text. Wording changes upstream silently degrade this to a plain
    :class:`UpstreamWriteError`.
    """

    if error.status_code == HTTPStatus.FORBIDDEN:
        haystacks = (error.message.lower(), error.text.lower())
        if any("resource not accessible" in text for text in haystacks):
            return TokenPermissionError(PERMISSION_DETAILS, upstream_status=error.status_code)
        if any("protected" in text for text in haystacks):
            return ProtectedBranchError(PROTECTED_BRANCH_DETAILS, upstream_status=error.status_code)
    return UpstreamWriteError(str(error), upstream_status=error.status_code)


@dataclass(slots=True)
class FilePublisher:
    """Write one file to one branch using GitHub's optimistic version token.

    ``strict_lookup`` controls whether a failed version-token read aborts the
    publish or is logged and ignored. ``classify_failures`` enables mapping of
    rejected writes onto :class:`TokenPermissionError` and
    :class:`ProtectedBranchError`.
    """

    client: SupportsContents
    strict_lookup: bool = True
    classify_failures: bool = False

    def publish_file(self, path: str, branch: str, base64_content: str, commit_message: str) -> CommitResult:
        token = self._read_version_token(path, branch)

        try:
            commit_sha = self.client.put_file(
                path,
                branch=branch,
                content=base64_content,
                message=commit_message,
                sha=token,
            )
        except GitHubAPIError as exc:
            if self.classify_failures:
                raise classify_write_failure(exc) from exc
            raise UpstreamWriteError(str(exc), upstream_status=exc.status_code) from exc

        if not commit_sha:
            LOGGER.warning("GitHub response omitted the commit sha", extra={"event": "publish.missing_sha", "path": path})

        LOGGER.info(
            "Committed %s to %s",
            path,
            branch,
            extra={"event": "publish.committed", "commit_sha": commit_sha, "updated": token is not None},
        )
        return CommitResult(branch=branch, commit_sha=commit_sha, file_path=path)

    def _read_version_token(self, path: str, branch: str) -> FileVersionToken | None:
        try:
            return self.client.get_file_sha(path, branch)
        except GitHubAPIError as exc:
            if self.strict_lookup:
                raise UpstreamLookupError(str(exc), upstream_status=exc.status_code) from exc
            LOGGER.warning(
                "Could not read current version of %s; writing without it",
                path,
                extra={"event": "publish.lookup_ignored", "status": exc.status_code},
            )
            return None


__all__ = [
    "FilePublisher",
    "PERMISSION_DETAILS",
    "PROTECTED_BRANCH_DETAILS",
    "SupportsContents",
    "classify_write_failure",
]
