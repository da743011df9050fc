"""
Preflight middleware.

Answers every OPTIONS request with an empty 200 before routing or
authentication, including browser preflights, and stamps the CORS
headers browsers need on all other responses.
"""

from typing import Iterable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

CORS_HEADERS = {
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}


class PreflightMiddleware(BaseHTTPMiddleware):
    """Short-circuit OPTIONS requests and add CORS headers."""

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str] = ("*",)):
        super().__init__(app)
        self.allowed_origins = list(allowed_origins)

    def _allow_origin(self, request: Request) -> Optional[str]:
        if "*" in self.allowed_origins:
            return "*"
        origin = request.headers.get("origin")
        if origin in self.allowed_origins:
            return origin
        return None

    def _cors_headers(self, request: Request) -> dict:
        headers = dict(CORS_HEADERS)
        origin = self._allow_origin(request)
        if origin is not None:
            headers["Access-Control-Allow-Origin"] = origin
            if origin != "*":
                headers["Vary"] = "Origin"
        return headers

    async def dispatch(self, request: Request, call_next):
        headers = self._cors_headers(request)

        if request.method == "OPTIONS":
            return Response(status_code=200, headers=headers)

        response = await call_next(request)
        for name, value in headers.items():
            response.headers.setdefault(name, value)
        return response
