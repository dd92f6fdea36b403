"""Naming conventions for branches, paths and commit messages."""
from __future__ import annotations

from datetime import datetime, timezone

PREVIEW_BRANCH_PREFIX = "preview-"


def create_branch_name(site_id: str) -> str:
    """Return the preview branch used to stage ``site_id``."""

    return f"{PREVIEW_BRANCH_PREFIX}{site_id}"


def site_config_path(site_id: str) -> str:
    """Return the repository path holding the configuration of ``site_id``."""

    return f"data/sites/{site_id}/siteConfig.json"


def commit_timestamp(now: datetime | None = None) -> str:
    """Return a UTC ISO-8601 timestamp with ``:`` and ``.`` replaced by ``-``.

    The format matches ``2024-05-01T09-30-00-123Z`` (millisecond precision).
    """

    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    milliseconds = moment.microsecond // 1000
    return f"{moment.strftime('%Y-%m-%dT%H-%M-%S')}-{milliseconds:03d}Z"


def preview_commit_message(site_id: str, now: datetime | None = None) -> str:
    return f"Preview update for {site_id} ({commit_timestamp(now)})"


def publish_commit_message(site_id: str, now: datetime | None = None) -> str:
    return f"Publish for {site_id} at {commit_timestamp(now)}"


__all__ = [
    "PREVIEW_BRANCH_PREFIX",
    "commit_timestamp",
    "create_branch_name",
    "preview_commit_message",
    "publish_commit_message",
    "site_config_path",
]
