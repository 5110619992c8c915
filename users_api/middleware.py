"""ASGI middleware wrapping every request handled by the service."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from fastapi import status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import BaseRoute
from starlette.staticfiles import StaticFiles
from starlette.types import ASGIApp, Receive, Scope, Send

from .errors import GENERIC_FAULT_MESSAGE

logger = logging.getLogger("usersapi.errors")

_STATIC_METHODS = frozenset({"GET", "HEAD"})


class StaticFilesMiddleware(BaseHTTPMiddleware):
    """Answer GET/HEAD requests naming a file in ``directory`` before routing.

    Anything that is not a file on disk falls through to the application.
    """

    def __init__(self, app: ASGIApp, *, directory: Path) -> None:
        super().__init__(app)
        self.directory = directory
        self._files = StaticFiles(directory=str(directory), html=True, check_dir=False)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method not in _STATIC_METHODS:
            return await call_next(request)

        try:
            path = self._files.get_path(request.scope)
            response = await self._files.get_response(path, request.scope)
        except StarletteHTTPException as exc:
            if exc.status_code != status.HTTP_404_NOT_FOUND:
                raise
            return await call_next(request)

        # html mode answers misses with a 404.html page when one exists.
        if response.status_code == status.HTTP_404_NOT_FOUND:
            return await call_next(request)
        return response


class LenientRoutingMiddleware:
    """Match route paths ignoring letter case and a single trailing slash.

    The request path is rewritten to the registered route path before routing.
    Parametrised routes are left to the router.
    """

    def __init__(self, app: ASGIApp, *, routes: List[BaseRoute]) -> None:
        self.app = app
        self._routes = routes

    def _canonical_path(self, path: str) -> Optional[str]:
        key = path[:-1] if len(path) > 1 and path.endswith("/") else path
        key = key.lower()
        for route in self._routes:
            route_path = getattr(route, "path", None)
            if not route_path or "{" in route_path:
                continue
            if route_path.lower() == key:
                return route_path
        return None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            canonical = self._canonical_path(scope["path"])
            if canonical is not None and canonical != scope["path"]:
                scope = dict(scope, path=canonical)
        await self.app(scope, receive, send)


class FaultBoundaryMiddleware(BaseHTTPMiddleware):
    """Convert any exception escaping the application into a generic 500."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error while processing %s %s",
                request.method,
                request.url.path,
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": GENERIC_FAULT_MESSAGE},
            )


__all__ = ["FaultBoundaryMiddleware", "LenientRoutingMiddleware", "StaticFilesMiddleware"]
