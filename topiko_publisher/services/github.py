"""Thin client over the GitHub REST endpoints used to publish site configurations.

Only four calls are needed: reading and creating branch references, reading the
blob ``sha`` of an existing file and the create-or-update contents call. The
client never retries; callers decide how failures are reported.
"""

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus
import json
import logging
from typing import Any

import httpx

from topiko_publisher.models.publishing import BranchRef, FileVersionToken
from topiko_publisher.settings import DEFAULT_API_BASE, Settings

LOGGER = logging.getLogger(__name__)

_ACCEPT_HEADER = "application/vnd.github.v3+json"


class GitHubAPIError(RuntimeError):
    """Raised when GitHub answers with a non-success status or cannot be reached."""

    def __init__(self, summary: str, *, status_code: int | None = None, text: str = "") -> None:
        super().__init__(summary)
        self.summary = summary
        self.status_code = status_code
        self.text = text

    @property
    def message(self) -> str:
        """Return the ``message`` field of GitHub's JSON error body, or the raw text."""

        try:
            payload = json.loads(self.text)
        except (TypeError, ValueError):
            return self.text
        if isinstance(payload, Mapping):
            message = payload.get("message")
            if isinstance(message, str):
                return message
        return self.text


class GitHubRepositoryClient:
    """Bind an ``httpx.Client`` to a single ``owner/repo`` on the GitHub API."""

    def __init__(
        self,
        *,
        owner: str,
        repo: str,
        token: str,
        api_base: str = DEFAULT_API_BASE,
        user_agent: str = "topiko-publisher",
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self._client = httpx.Client(
            base_url=api_base.rstrip("/") or DEFAULT_API_BASE,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": _ACCEPT_HEADER,
                "User-Agent": user_agent,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        user_agent: str = "topiko-publisher",
        transport: httpx.BaseTransport | None = None,
    ) -> "GitHubRepositoryClient":
        return cls(
            owner=settings.github_owner,
            repo=settings.github_repo,
            token=settings.github_token,
            api_base=settings.api_base,
            user_agent=user_agent,
            timeout=settings.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubRepositoryClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Branch references
    # ------------------------------------------------------------------
    def get_ref(self, branch: str) -> BranchRef | None:
        """Return the head of ``branch`` or ``None`` when it does not exist."""

        response = self._request("GET", f"{self._repo_path}/git/ref/heads/{branch}")
        if response.status_code == HTTPStatus.NOT_FOUND:
            return None
        self._raise_for_status(response, f"GitHub API error: {response.status_code}")
        payload = self._json(response)
        return BranchRef(name=branch, head_commit_sha=str(payload.get("object", {}).get("sha", "")))

    def create_ref(self, branch: str, sha: str) -> BranchRef:
        """Create ``refs/heads/<branch>`` pointing at ``sha``."""

        response = self._request(
            "POST",
            f"{self._repo_path}/git/refs",
            json={"ref": f"refs/heads/{branch}", "sha": sha},
        )
        self._raise_for_status(response, f"Failed to create branch: {response.status_code}")
        return BranchRef(name=branch, head_commit_sha=sha)

    # ------------------------------------------------------------------
    # Repository contents
    # ------------------------------------------------------------------
    def get_file_sha(self, path: str, branch: str) -> FileVersionToken | None:
        """Return the blob ``sha`` of ``path`` on ``branch``, ``None`` if absent."""

        response = self._request("GET", f"{self._repo_path}/contents/{path}", params={"ref": branch})
        if response.status_code == HTTPStatus.NOT_FOUND:
            return None
        self._raise_for_status(response, f"Failed to get file SHA: {response.status_code}")
        sha = self._json(response).get("sha")
        return FileVersionToken(sha) if isinstance(sha, str) and sha else None

    def put_file(
        self,
        path: str,
        *,
        branch: str,
        content: str,
        message: str,
        sha: FileVersionToken | None = None,
    ) -> str:
        """Create or update ``path`` and return the resulting commit sha (may be empty)."""

        body: dict[str, Any] = {"message": message, "content": content, "branch": branch}
        if sha:
            body["sha"] = sha

        response = self._request("PUT", f"{self._repo_path}/contents/{path}", json=body)
        self._raise_for_status(response, f"Failed to update file: {response.status_code} - {response.text}")
        commit = self._json(response).get("commit") or {}
        return str(commit.get("sha") or "") if isinstance(commit, Mapping) else ""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            LOGGER.warning("GitHub request failed", extra={"event": "github.transport", "method": method, "url": url})
            raise GitHubAPIError(f"Failed to reach GitHub: {exc}") from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response, summary: str) -> None:
        if response.is_success:
            return
        raise GitHubAPIError(summary, status_code=response.status_code, text=response.text)

    @staticmethod
    def _json(response: httpx.Response) -> Mapping[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, Mapping) else {}


__all__ = ["GitHubAPIError", "GitHubRepositoryClient"]
