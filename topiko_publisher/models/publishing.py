"""Data structures exchanged between the gateway, resolver and publisher."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NewType

FileVersionToken = NewType("FileVersionToken", str)


@dataclass(frozen=True, slots=True)
class BranchRef:
    """The current tip of a named branch."""

    name: str
    head_commit_sha: str


@dataclass(frozen=True, slots=True)
class CommitResult:
    """Confirmation returned after a site configuration was committed."""

    branch: str
    commit_sha: str
    file_path: str

    def to_payload(self, status: str) -> dict[str, Any]:
        """Return the success body reported to gateway callers."""

        return {
            "status": status,
            "branch": self.branch,
            "commitSha": self.commit_sha,
            "filePath": self.file_path,
        }
