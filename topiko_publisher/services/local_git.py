"""Trigger previews and publishes from a local working copy using the git CLI."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import logging
import subprocess
from typing import Any, Mapping

from topiko_publisher.services.serializer import serialize_site_config
from topiko_publisher.utils.naming import create_branch_name, site_config_path

LOGGER = logging.getLogger(__name__)

_NOTHING_TO_COMMIT_MARKERS = ("nothing to commit", "nothing added to commit", "no changes added to commit")


@dataclass(slots=True)
class LocalPublishResult:
    """Outcome of a local preview or publish trigger."""

    branch: str
    path: Path
    commit_hash: str
    committed: bool

    def to_payload(self, repo_path: Path) -> dict[str, Any]:
        return {
            "branch": self.branch,
            "filePath": self.path.relative_to(repo_path).as_posix(),
            "commitHash": self.commit_hash,
            "committed": self.committed,
        }


@dataclass(slots=True)
class LocalGitPublisher:
    """Write ``siteConfig.json`` into a checkout, commit it and optionally push."""

    repo_path: Path
    remote: str = "origin"
    default_branch: str = "main"
    git_executable: str = "git"

    def trigger_preview(self, site_id: str, site_config: Mapping[str, Any], *, push: bool = True) -> LocalPublishResult:
        """Commit ``site_config`` on ``preview-<site_id>``, resetting the branch to HEAD."""

        self._ensure_repository()
        branch = create_branch_name(site_id)
        LOGGER.info("Preparing preview for %s", site_id, extra={"event": "local.preview", "branch": branch})

        self._run_git("checkout", "-B", branch)
        destination = self._write_config(site_id, site_config)
        committed = self._commit(destination, f"Preview update for {site_id}")
        if push:
            self._run_git("push", "-u", self.remote, branch)

        LOGGER.info("Preview triggered!", extra={"event": "local.preview_done", "committed": committed})
        return self._result(branch, destination, committed)

    def trigger_publish(self, site_id: str, site_config: Mapping[str, Any], *, push: bool = True) -> LocalPublishResult:
        """Commit ``site_config`` on the default branch after syncing with the remote."""

        self._ensure_repository()
        LOGGER.info("Publishing site: %s", site_id, extra={"event": "local.publish"})

        self._run_git("checkout", self.default_branch)
        if push:
            self._run_git("pull")
        destination = self._write_config(site_id, site_config)
        committed = self._commit(destination, f"Publish site {site_id}")
        if push:
            self._run_git("push")

        LOGGER.info("Publish triggered!", extra={"event": "local.publish_done", "committed": committed})
        return self._result(self.default_branch, destination, committed)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _ensure_repository(self) -> None:
        if not self.repo_path.exists():
            raise FileNotFoundError(f"Repository path '{self.repo_path}' does not exist")

    def _write_config(self, site_id: str, site_config: Mapping[str, Any]) -> Path:
        destination = self.repo_path / site_config_path(site_id)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(serialize_site_config(site_config), encoding="utf-8")
        return destination

    def _commit(self, destination: Path, message: str) -> bool:
        """Stage and commit ``destination``; return ``False`` when nothing changed."""

        self._run_git("add", destination.relative_to(self.repo_path).as_posix())
        result = self._run_git("commit", "-m", message, check=False)
        if result.returncode == 0:
            return True
        output = f"{result.stdout}\n{result.stderr}".lower()
        if any(marker in output for marker in _NOTHING_TO_COMMIT_MARKERS):
            LOGGER.info("No changes to commit", extra={"event": "local.unchanged"})
            return False
        raise RuntimeError(f"git commit failed: {result.stderr.strip() or result.stdout.strip()}")

    def _result(self, branch: str, destination: Path, committed: bool) -> LocalPublishResult:
        commit_hash = self._run_git("rev-parse", "HEAD").stdout.strip()
        return LocalPublishResult(branch=branch, path=destination, commit_hash=commit_hash, committed=committed)

    def _run_git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        """Execute a Git command within the repository, raising on error when ``check``."""

        result = subprocess.run(
            [self.git_executable, *args],
            cwd=self.repo_path,
            text=True,
            check=False,
            capture_output=True,
        )
        if check and result.returncode != 0:
            command = " ".join(args)
            raise RuntimeError(f"git {command} failed: {result.stderr.strip()}")
        return result


__all__ = ["LocalGitPublisher", "LocalPublishResult"]
