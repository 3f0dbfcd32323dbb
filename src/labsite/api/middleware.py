"""
Request ID and CORS middleware.
"""

import uuid
from typing import Callable, Sequence

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .app_logging import set_request_id


ALLOWED_METHODS = "GET, OPTIONS"
ALLOWED_HEADERS = "Content-Type"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to each request."""

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_id(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class CORSMiddleware(BaseHTTPMiddleware):
    """Handle CORS preflight requests and append CORS headers to all responses.

    The content endpoints are public and read-only, so a ``*`` origin list
    answers with a wildcard and never with credentials.
    """

    def __init__(self, app: ASGIApp, origins: Sequence[str] = ("*",)):
        super().__init__(app)
        self.origins = list(origins)

    def _allow_origin(self, origin: str) -> str:
        if "*" in self.origins:
            return "*"
        if origin and origin in self.origins:
            return origin
        return ""

    async def dispatch(self, request: Request, call_next: Callable):
        allow_origin = self._allow_origin(request.headers.get("Origin", ""))

        if request.method == "OPTIONS" and request.headers.get("Access-Control-Request-Method"):
            response = Response(status_code=204)
            if allow_origin:
                response.headers["Access-Control-Allow-Origin"] = allow_origin
                response.headers["Access-Control-Allow-Methods"] = ALLOWED_METHODS
                response.headers["Access-Control-Allow-Headers"] = ALLOWED_HEADERS
            return response

        response = await call_next(request)
        if allow_origin and "Access-Control-Allow-Origin" not in response.headers:
            response.headers["Access-Control-Allow-Origin"] = allow_origin
        if allow_origin and allow_origin != "*":
            response.headers["Vary"] = "Origin"
        return response
