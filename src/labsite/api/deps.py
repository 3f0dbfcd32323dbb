import httpx
from fastapi import HTTPException, Request, status

from ..core.google_clients import GoogleCredentialHolder
from ..core.sheets import SheetClient
from .config import Settings, settings as global_settings

# Shared services live on app.state; the app factory lifespan populates them.


def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or global_settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="HTTP client not initialized",
        )
    return client


def get_credential_holder(request: Request) -> GoogleCredentialHolder:
    holder = getattr(request.app.state, "credential_holder", None)
    if holder is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Google credentials not initialized",
        )
    return holder


def get_sheet_client(request: Request) -> SheetClient:
    return SheetClient(get_http_client(request))
