"""Preview and production publishing workflows for a site configuration."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Any, Protocol

from topiko_publisher.models.publishing import CommitResult
from topiko_publisher.services.branches import BranchResolver, SupportsBranchRefs
from topiko_publisher.services.file_publisher import FilePublisher, SupportsContents
from topiko_publisher.services.serializer import encode_content, serialize_site_config
from topiko_publisher.utils.naming import (
    create_branch_name,
    preview_commit_message,
    publish_commit_message,
    site_config_path,
)

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SupportsRepository(SupportsBranchRefs, SupportsContents, Protocol):
    """The GitHub operations both workflows rely on."""


@dataclass(slots=True)
class SitePublisher:
    """Commit ``data/sites/<siteId>/siteConfig.json`` for preview or production."""

    client: SupportsRepository
    default_branch: str = "main"
    clock: Clock = _utcnow

    def preview(self, site_id: str, site_config: Mapping[str, Any]) -> CommitResult:
        """Stage ``site_config`` on ``preview-<site_id>``, creating the branch if needed."""

        branch = create_branch_name(site_id)
        LOGGER.info("Preparing preview for %s", site_id, extra={"event": "preview.start", "branch": branch})

        content = self._encode(site_config)
        BranchResolver(self.client).ensure_branch(branch, self.default_branch)
        publisher = FilePublisher(self.client, strict_lookup=False, classify_failures=False)
        return publisher.publish_file(
            site_config_path(site_id), branch, content, preview_commit_message(site_id, self.clock())
        )

    def publish(
        self,
        site_id: str,
        site_config: Mapping[str, Any],
        *,
        message: str | None = None,
    ) -> CommitResult:
        """Commit ``site_config`` straight to the default branch."""

        LOGGER.info("Publishing site %s", site_id, extra={"event": "publish.start", "branch": self.default_branch})

        content = self._encode(site_config)
        commit_message = message or publish_commit_message(site_id, self.clock())
        publisher = FilePublisher(self.client, strict_lookup=True, classify_failures=True)
        return publisher.publish_file(site_config_path(site_id), self.default_branch, content, commit_message)

    @staticmethod
    def _encode(site_config: Mapping[str, Any]) -> str:
        # Runs before any repository call.
        return encode_content(serialize_site_config(site_config))


__all__ = ["SitePublisher", "SupportsRepository"]
