"""Exception types raised across the publishing pipeline.

Every error that can reach the request gateway derives from
:class:`PublishingError` and knows how it should be rendered: the HTTP status
code, the ``error`` label and the optional ``details`` text of the JSON body.
"""

from __future__ import annotations

from typing import Any


class PublishingError(Exception):
    """Base class for failures converted into structured gateway responses."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, details: str | None = None) -> None:
        super().__init__(details or self.error)
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body describing this failure."""

        payload: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(PublishingError):
    """Raised when the request body is malformed or a field is invalid."""

    status_code = 400
    error = "validation"


class AuthError(PublishingError):
    """Raised when the shared-secret header is missing or incorrect."""

    status_code = 401
    error = "Unauthorized"


class NotFoundError(PublishingError):
    status_code = 404
    error = "Not found"


class MethodNotAllowedError(PublishingError):
    status_code = 405
    error = "Method not allowed"


class InternalError(PublishingError):
    """Wraps anything the gateway did not anticipate."""


class UpstreamError(PublishingError):
    """Base class for failures reported by the GitHub API."""

    error = "GitHub API error"

    def __init__(self, details: str, *, upstream_status: int | None = None) -> None:
        super().__init__(details)
        self.upstream_status = upstream_status


class UpstreamLookupError(UpstreamError):
    """A read against GitHub failed with something other than 404."""


class UpstreamWriteError(UpstreamError):
    """Creating a branch or writing a file was rejected by GitHub."""


class TokenPermissionError(UpstreamWriteError):
    """GitHub reported that the access token lacks repository write access."""

    status_code = 403


class ProtectedBranchError(UpstreamWriteError):
    """GitHub refused a direct write because the branch is protected."""

    status_code = 409


class BaseBranchNotFound(UpstreamLookupError):
    """The default branch could not be found; the repository is misconfigured."""


class SerializationError(PublishingError):
    """Raised when a site configuration cannot be rendered as JSON."""


class ConfigurationError(RuntimeError):
    """Raised when required process configuration is missing."""


__all__ = [
    "AuthError",
    "BaseBranchNotFound",
    "ConfigurationError",
    "InternalError",
    "MethodNotAllowedError",
    "NotFoundError",
    "ProtectedBranchError",
    "PublishingError",
    "SerializationError",
    "TokenPermissionError",
    "UpstreamError",
    "UpstreamLookupError",
    "UpstreamWriteError",
    "ValidationError",
]
