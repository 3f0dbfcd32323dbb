"""
Application factory for building the FastAPI app.

Used by ``labsite.api.main`` (Uvicorn via run_api.py) and by tests, which
pass their own Settings and, when they want to stub upstream HTTP, their own
``httpx.AsyncClient`` and credential holder.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.google_clients import GoogleCredentialHolder
from .app_logging import get_logger, get_request_id, setup_logging
from .config import Settings, settings as global_settings
from .exceptions import APIException, ContentLoadError
from .middleware import CORSMiddleware, RequestIDMiddleware


def create_app(
    custom_settings: Optional[Settings] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    credential_holder: Optional[GoogleCredentialHolder] = None,
) -> FastAPI:
    """
    Build the FastAPI ASGI application.

    Args:
        custom_settings: Optional Settings instance. If omitted, the global
            Settings object that is shared across modules will be used.
        http_client: Optional pre-built client; the app does not close it.
        credential_holder: Optional pre-built Google credential holder.
    """

    active_settings = custom_settings or global_settings
    log_level = "INFO" if not active_settings.debug else "DEBUG"
    setup_logging(level=log_level, use_json=True)
    app_logger = get_logger(__name__)

    app_logger.info(
        "Starting application: environment=%s, debug=%s, log_level=%s",
        active_settings.environment,
        active_settings.debug,
        log_level,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup/shutdown."""
        owned_client: Optional[httpx.AsyncClient] = None
        if getattr(app.state, "http_client", None) is None:
            owned_client = httpx.AsyncClient(timeout=active_settings.http_timeout_seconds)
            app.state.http_client = owned_client
            app_logger.info("HTTP client initialized")
        if getattr(app.state, "credential_holder", None) is None:
            app.state.credential_holder = GoogleCredentialHolder(
                active_settings.google_client_email,
                active_settings.google_private_key,
            )
            if not app.state.credential_holder.configured:
                app_logger.warning("Google service account is not configured; /api/background will fail")

        yield

        app_logger.info("Shutting down application")
        if owned_client is not None:
            try:
                await asyncio.wait_for(owned_client.aclose(), timeout=5.0)
                app_logger.info("HTTP client closed")
            except asyncio.TimeoutError:  # pragma: no cover - defensive logging
                app_logger.error("HTTP client close timed out after 5 seconds")
            finally:
                app.state.http_client = None

    app = FastAPI(
        title=active_settings.app_name,
        description="Lab website content: background primers, protocols and communication resources",
        version=active_settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = active_settings
    app.state.http_client = http_client
    app.state.credential_holder = credential_holder

    from .public import router as public_router
    from .web import router as web_router

    app.include_router(public_router)
    app.include_router(web_router)

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        request_id = get_request_id()
        app_logger.warning(
            "APIException handled",
            extra={
                "request_id": request_id,
                "status_code": exc.status_code,
                "detail": exc.detail,
            },
        )
        if isinstance(exc, ContentLoadError):
            content = {"error": exc.error, "detail": exc.detail}
        else:
            content = {"error": exc.detail}
        content.update({"error_code": exc.error_code, "request_id": request_id})
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):  # pragma: no cover - FastAPI wiring
        request_id = get_request_id()
        app_logger.error(
            "Unhandled exception: path=%s, method=%s, error=%s, error_type=%s",
            request.url.path,
            request.method,
            str(exc),
            type(exc).__name__,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if active_settings.debug else "An error occurred",
                "error_type": type(exc).__name__,
                "request_id": request_id,
            }
        )

    # Middleware executes in reverse order of registration
    app.add_middleware(CORSMiddleware, origins=active_settings.cors_origins)
    app.add_middleware(RequestIDMiddleware)

    return app


__all__ = ["create_app"]
