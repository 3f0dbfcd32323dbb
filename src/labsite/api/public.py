from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query, Response

from ..core.google_clients import GoogleCredentialHolder
from ..core.sheets import SheetClient
from .app_logging import get_logger
from .config import Settings
from .deps import get_credential_holder, get_http_client, get_settings, get_sheet_client
from .exceptions import ContentLoadError
from .loaders import load_background, load_communication, load_protocols
from .models import (
    BackgroundResponse,
    CommunicationResponse,
    ErrorResponse,
    HealthResponse,
    ProtocolsResponse,
)

router = APIRouter()

logger = get_logger(__name__)

BACKGROUND_LOAD_ERROR = "Unable to load background content"


def _content_headers(settings: Settings) -> dict:
    return {
        "Access-Control-Allow-Origin": "*",
        "Cache-Control": settings.cache_control,
    }


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(status="ok", version=settings.app_version)


@router.get(
    "/api/background",
    response_model=BackgroundResponse,
    response_model_by_alias=True,
    responses={500: {"model": ErrorResponse}},
)
async def background(
    response: Response,
    doc_id: Optional[str] = Query(default=None, alias="docId"),
    settings: Settings = Depends(get_settings),
    holder: GoogleCredentialHolder = Depends(get_credential_holder),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    """Return the background primer as sections of rendered HTML blocks."""
    document_id = (doc_id or "").strip() or settings.background_doc_id
    try:
        sections = await load_background(document_id, holder, http_client)
    except Exception as exc:
        logger.error("Background load failed for %s: %s", document_id, exc, exc_info=True)
        raise ContentLoadError(
            BACKGROUND_LOAD_ERROR,
            detail=str(exc) or type(exc).__name__,
            headers={"Access-Control-Allow-Origin": "*"},
        ) from exc
    response.headers.update(_content_headers(settings))
    return BackgroundResponse(doc_id=document_id, sections=sections)


@router.get("/api/protocols", response_model=ProtocolsResponse, response_model_by_alias=True)
async def protocols(
    response: Response,
    settings: Settings = Depends(get_settings),
    sheets: SheetClient = Depends(get_sheet_client),
):
    records = await load_protocols(sheets, settings)
    response.headers.update(_content_headers(settings))
    return ProtocolsResponse(
        sheet_id=settings.protocol_sheet_id,
        protocols=[record.to_dict() for record in records],
    )


@router.get("/api/communication", response_model=CommunicationResponse, response_model_by_alias=True)
async def communication(
    response: Response,
    settings: Settings = Depends(get_settings),
    sheets: SheetClient = Depends(get_sheet_client),
):
    categories = await load_communication(sheets, settings)
    response.headers.update(_content_headers(settings))
    return CommunicationResponse(sheet_id=settings.communication_sheet_id, categories=categories)
