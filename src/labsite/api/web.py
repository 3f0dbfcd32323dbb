"""
Server-rendered HTML fragments for the background, protocols and
communication pages. Load failures render the generic empty state; technical
details only go to the log.
"""

from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from ..core.google_clients import GoogleCredentialHolder
from ..core.rendering import render_background, render_communication, render_protocols
from ..core.sheets import SheetClient, SheetFetchError
from .app_logging import get_logger
from .config import Settings
from .deps import get_credential_holder, get_http_client, get_settings, get_sheet_client
from .loaders import fetch_protocol_rows, load_background, load_communication

router = APIRouter()

logger = get_logger(__name__)


@router.get("/background", response_class=HTMLResponse)
async def background_page(
    doc_id: Optional[str] = Query(default=None, alias="docId"),
    settings: Settings = Depends(get_settings),
    holder: GoogleCredentialHolder = Depends(get_credential_holder),
    http_client: httpx.AsyncClient = Depends(get_http_client),
):
    document_id = (doc_id or "").strip() or settings.background_doc_id
    try:
        sections = await load_background(document_id, holder, http_client)
    except Exception as exc:
        logger.error("Unable to render background for %s: %s", document_id, exc, exc_info=True)
        return HTMLResponse(render_background([], error=True))
    return HTMLResponse(render_background(sections))


@router.get("/protocols", response_class=HTMLResponse)
async def protocols_page(
    q: Optional[str] = Query(default=None, max_length=200),
    settings: Settings = Depends(get_settings),
    sheets: SheetClient = Depends(get_sheet_client),
):
    if not settings.protocol_sheet_id:
        logger.warning("No Google Sheet configured for protocols")
        return HTMLResponse(render_protocols([], query=q, error=True))
    try:
        records = await fetch_protocol_rows(sheets, settings)
    except SheetFetchError as exc:
        logger.warning("Unable to render protocols: %s", exc)
        return HTMLResponse(
            render_protocols([], query=q, default_image=settings.default_protocol_image, error=True)
        )
    return HTMLResponse(
        render_protocols(records, query=q, default_image=settings.default_protocol_image)
    )


@router.get("/communication", response_class=HTMLResponse)
async def communication_page(
    settings: Settings = Depends(get_settings),
    sheets: SheetClient = Depends(get_sheet_client),
):
    categories = await load_communication(sheets, settings)
    return HTMLResponse(render_communication(categories))
