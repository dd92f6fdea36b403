"""Process-wide configuration for the publishing workers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os

from topiko_publisher.errors import ConfigurationError

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_BRANCH = "main"

_REQUIRED_VARIABLES = {
    "github_owner": "GITHUB_OWNER",
    "github_repo": "GITHUB_REPO",
    "github_token": "GITHUB_TOKEN",
    "shared_secret": "PREVIEW_SECRET",
}


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable configuration injected into the gateway at startup."""

    github_owner: str
    github_repo: str
    github_token: str
    shared_secret: str
    default_branch: str = DEFAULT_BRANCH
    api_base: str = DEFAULT_API_BASE
    timeout: float | None = None

    @property
    def repository(self) -> str:
        """Return the repository in ``owner/name`` form."""

        return f"{self.github_owner}/{self.github_repo}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables, failing on missing values."""

        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        missing: list[str] = []
        for field_name, variable in _REQUIRED_VARIABLES.items():
            value = (env.get(variable) or "").strip()
            if not value:
                missing.append(variable)
            values[field_name] = value
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

        raw_timeout = (env.get("TOPIKO_GITHUB_TIMEOUT") or "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else None
        except ValueError as exc:
            raise ConfigurationError("TOPIKO_GITHUB_TIMEOUT must be a number of seconds") from exc

        return cls(
            default_branch=(env.get("TOPIKO_DEFAULT_BRANCH") or DEFAULT_BRANCH).strip() or DEFAULT_BRANCH,
            api_base=(env.get("TOPIKO_GITHUB_API") or DEFAULT_API_BASE).rstrip("/") or DEFAULT_API_BASE,
            timeout=timeout,
            **values,
        )


__all__ = ["DEFAULT_API_BASE", "DEFAULT_BRANCH", "Settings"]
