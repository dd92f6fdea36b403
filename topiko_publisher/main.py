"""FastAPI gateways for the Topiko preview and publish workers.

Two applications are exposed, one per worker, each serving a single endpoint:

* ``preview_app`` handles ``POST /api/preview`` and commits the site
  configuration to ``preview-<siteId>``.
* ``publish_app`` handles ``POST /api/publish`` and commits it to the default
  branch.

Run either with an ASGI server, e.g. ``uvicorn topiko_publisher.main:preview_app``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import json
import logging
import secrets
from typing import Any

import httpx
from fastapi import Depends, FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic import ValidationError as PydanticValidationError

from topiko_publisher.errors import (
    AuthError,
    ConfigurationError,
    InternalError,
    MethodNotAllowedError,
    NotFoundError,
    PublishingError,
    UpstreamError,
    ValidationError,
)
from topiko_publisher.models.publishing import CommitResult
from topiko_publisher.services.github import GitHubRepositoryClient
from topiko_publisher.services.site_publisher import SitePublisher
from topiko_publisher.settings import Settings

logger = logging.getLogger(__name__)

SECRET_HEADER = "x-topiko-secret"
_ALLOWED_HEADERS = f"Content-Type, {SECRET_HEADER}"

_FIELD_ERRORS = {
    "siteId": "siteId must be a string",
    "siteConfig": "siteConfig must be an object",
    "publishMessage": "publishMessage must be a string",
}


@dataclass(frozen=True, slots=True)
class WorkerProfile:
    """Differences between the preview and publish gateways."""

    name: str
    endpoint: str
    success_status: str
    allowed_methods: str
    preflight_status: int
    liveness: bool = False
    preflight_max_age: str | None = None

    @property
    def user_agent(self) -> str:
        return f"topiko-{self.name}-worker"

    def cors_headers(self) -> dict[str, str]:
        headers = {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": _ALLOWED_HEADERS,
            "Access-Control-Allow-Methods": self.allowed_methods,
        }
        if self.preflight_max_age:
            headers["Access-Control-Max-Age"] = self.preflight_max_age
        return headers


PREVIEW_WORKER = WorkerProfile(
    name="preview",
    endpoint="/api/preview",
    success_status="preview-triggered",
    allowed_methods="GET, POST, OPTIONS",
    preflight_status=204,
    liveness=True,
    preflight_max_age="86400",
)

PUBLISH_WORKER = WorkerProfile(
    name="publish",
    endpoint="/api/publish",
    success_status="published",
    allowed_methods="POST, OPTIONS",
    preflight_status=200,
)


class PublishRequest(BaseModel):
    """Payload posted by the site builder to either worker."""

    model_config = ConfigDict(populate_by_name=True)

    site_id: StrictStr = Field(..., alias="siteId", min_length=1, description="Site identifier, used verbatim.")
    site_config: dict[str, Any] = Field(..., alias="siteConfig", description="Site configuration to commit.")
    publish_message: StrictStr | None = Field(
        default=None,
        alias="publishMessage",
        description="Commit message override (publish worker only).",
    )


@lru_cache(maxsize=1)
def _settings_from_env() -> Settings:
    return Settings.from_env()


def get_settings() -> Settings:
    """FastAPI dependency returning the process-wide settings."""

    try:
        return _settings_from_env()
    except ConfigurationError as exc:
        logger.exception("Worker configuration invalid", extra={"event": "config.invalid"})
        raise InternalError(str(exc)) from exc


def get_github_transport() -> httpx.BaseTransport | None:
    """FastAPI dependency for the HTTP transport; ``None`` uses the network."""

    return None


def _require_secret(request: Request, settings: Settings) -> None:
    supplied = request.headers.get(SECRET_HEADER)
    if not supplied or not secrets.compare_digest(supplied.encode("utf-8"), settings.shared_secret.encode("utf-8")):
        raise AuthError()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _parse_publish_request(raw_body: bytes) -> PublishRequest:
    try:
        payload = json.loads(raw_body, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ValidationError("Invalid JSON body") from exc

    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    try:
        return PublishRequest.model_validate(payload)
    except PydanticValidationError as exc:
        field_name = next((str(error["loc"][0]) for error in exc.errors() if error.get("loc")), "")
        raise ValidationError(_FIELD_ERRORS.get(field_name, "Invalid request body")) from exc


def _run_worker(
    worker: WorkerProfile,
    settings: Settings,
    transport: httpx.BaseTransport | None,
    payload: PublishRequest,
) -> CommitResult:
    with GitHubRepositoryClient.from_settings(settings, user_agent=worker.user_agent, transport=transport) as client:
        publisher = SitePublisher(client=client, default_branch=settings.default_branch)
        if worker.name == PREVIEW_WORKER.name:
            return publisher.preview(payload.site_id, payload.site_config)
        return publisher.publish(payload.site_id, payload.site_config, message=payload.publish_message)


def _error_response(exc: PublishingError) -> JSONResponse:
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


def create_gateway(worker: WorkerProfile) -> FastAPI:
    """Build the ASGI application serving ``worker.endpoint``."""

    gateway = FastAPI(title=f"Topiko {worker.name.title()} Worker")

    @gateway.exception_handler(PublishingError)
    async def _handle_publishing_error(request: Request, exc: PublishingError) -> JSONResponse:
        return _error_response(exc)

    @gateway.middleware("http")
    async def _allow_any_origin(request: Request, call_next):  # type: ignore[no-untyped-def]
        response = await call_next(request)
        response.headers.setdefault("Access-Control-Allow-Origin", "*")
        return response

    @gateway.options("/{path:path}")
    async def preflight(path: str) -> Response:
        """Answer CORS pre-flight requests on any path."""

        return Response(status_code=worker.preflight_status, headers=worker.cors_headers())

    if worker.liveness:

        @gateway.get("/{path:path}")
        async def liveness(path: str) -> JSONResponse:
            """Report that the worker is up; used by browsers and probes."""

            return JSONResponse({"status": "ok", "worker": worker.name}, headers=worker.cors_headers())

    @gateway.post(worker.endpoint)
    async def trigger(
        request: Request,
        settings: Settings = Depends(get_settings),
        transport: httpx.BaseTransport | None = Depends(get_github_transport),
    ) -> JSONResponse:
        """Validate the request and commit the site configuration."""

        _require_secret(request, settings)
        payload = _parse_publish_request(await request.body())

        logger.info(
            "%s request received",
            worker.name.title(),
            extra={"event": f"{worker.name}.request", "site_id": payload.site_id},
        )

        try:
            result = await run_in_threadpool(_run_worker, worker, settings, transport, payload)
        except UpstreamError:
            logger.exception("GitHub API error", extra={"event": f"{worker.name}.upstream_error"})
            raise
        except PublishingError:
            raise
        except Exception as exc:
            logger.exception("Worker error", extra={"event": f"{worker.name}.internal_error"})
            raise InternalError(str(exc) or "Unknown error") from exc

        return JSONResponse(result.to_payload(worker.success_status))

    @gateway.post("/{path:path}")
    async def unknown_endpoint(path: str) -> JSONResponse:
        raise NotFoundError()

    rejected_methods = ["PUT", "PATCH", "DELETE", "HEAD"]
    if not worker.liveness:
        rejected_methods.insert(0, "GET")

    @gateway.api_route("/{path:path}", methods=rejected_methods)
    async def method_not_allowed(path: str) -> JSONResponse:
        raise MethodNotAllowedError()

    return gateway


preview_app = create_gateway(PREVIEW_WORKER)
publish_app = create_gateway(PUBLISH_WORKER)
