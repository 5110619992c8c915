"""HTTP API exposing the health check and the in-memory user endpoints."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, load_settings
from .errors import MISSING_FIELDS_MESSAGE, RouteNotFound, ServiceError, ValidationError
from .identifiers import IdGenerator
from .middleware import FaultBoundaryMiddleware, LenientRoutingMiddleware, StaticFilesMiddleware
from .models import SAMPLE_USERS, HealthStatus, User, format_timestamp, health_status

logger = logging.getLogger("usersapi.service")

# Unknown paths and known paths hit with the wrong method both count as unmatched.
_UNMATCHED_STATUS_CODES = frozenset(
    {status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED}
)


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    uptime: float


class UserView(BaseModel):
    id: int
    # Echoed exactly as received; only truthiness is checked.
    name: Any
    email: Any


def _health_to_response(health: HealthStatus) -> HealthResponse:
    return HealthResponse(
        status=health.status,
        timestamp=format_timestamp(health.timestamp),
        uptime=health.uptime,
    )


def _user_to_view(user: User) -> UserView:
    return UserView(id=user.id, name=user.name, email=user.email)


def _is_json_content_type(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON literal: {name}")


async def _read_json_body(request: Request) -> Dict[str, Any] | List[Any]:
    """Parse a JSON request body the way a strict JSON body parser would.

    Non-JSON and empty bodies read as ``{}``. Malformed JSON and top-level
    scalars raise ``ValueError`` and are left to the fault boundary.
    """

    if not _is_json_content_type(request.headers.get("content-type", "")):
        return {}

    raw = await request.body()
    if not raw.strip():
        return {}

    payload = json.loads(raw, parse_constant=_reject_constant)
    if not isinstance(payload, (dict, list)):
        raise ValueError("JSON request body must be an object or an array")
    return payload


def register_api_routes(app: FastAPI, id_generator: IdGenerator) -> None:
    """Expose the JSON API endpoints on the provided FastAPI application."""

    @app.api_route("/health", methods=["GET", "HEAD"], response_model=HealthResponse)
    async def healthcheck() -> HealthResponse:
        return _health_to_response(health_status())

    @app.api_route("/api/users", methods=["GET", "HEAD"], response_model=List[UserView])
    async def list_users() -> List[UserView]:
        return [_user_to_view(user) for user in SAMPLE_USERS]

    @app.post(
        "/api/users",
        status_code=status.HTTP_201_CREATED,
        response_model=UserView,
    )
    async def create_user(request: Request) -> UserView:
        payload = await _read_json_body(request)
        fields: Dict[str, Any] = payload if isinstance(payload, dict) else {}

        name = fields.get("name")
        email = fields.get("email")
        if not name or not email:
            raise ValidationError(MISSING_FIELDS_MESSAGE)

        user = User(id=id_generator.next_id(), name=name, email=email)
        logger.debug("Created transient user %s", user.id)
        return _user_to_view(user)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def handle_service_error(_: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in _UNMATCHED_STATUS_CODES:
            not_found = RouteNotFound()
            return JSONResponse(status_code=not_found.status_code, content=not_found.to_payload())
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=exc.headers,
        )


def create_app(
    settings: Settings | None = None,
    *,
    public_dir: Path | None = None,
    id_generator: IdGenerator | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application without binding any socket."""

    app_settings = settings or load_settings()
    static_dir = public_dir or app_settings.public_dir
    generator = id_generator or IdGenerator()

    app = FastAPI(
        title="Users API",
        version="1.0.0",
        description="Health check and in-memory user listing/creation API.",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )
    app.state.settings = app_settings
    app.state.id_generator = generator

    register_api_routes(app, generator)
    register_error_handlers(app)

    # The last middleware added is the outermost one.
    app.add_middleware(LenientRoutingMiddleware, routes=app.router.routes)
    app.add_middleware(StaticFilesMiddleware, directory=static_dir)
    app.add_middleware(FaultBoundaryMiddleware)

    return app


__all__ = ["create_app", "register_api_routes", "register_error_handlers"]
