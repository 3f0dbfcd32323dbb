"""
Content loaders shared by the JSON API, the HTML widgets and the CLI.

Each loader takes its collaborators explicitly (settings, credential holder,
HTTP client) so it can run inside a request or from a one-off script.
"""

import asyncio
from typing import Any, Dict, List, Optional

import httpx

from ..core.google_clients import GoogleCredentialHolder, fetch_document, fetch_inline_images
from ..core.google_docs_html import document_to_sections
from ..core.records import ProtocolRecord, normalize_protocols, normalize_resources
from ..core.sheets import SheetClient, SheetFetchError
from .app_logging import get_logger
from .config import CommunicationCategory, Settings

logger = get_logger(__name__)


async def load_background(
    doc_id: str,
    holder: GoogleCredentialHolder,
    http_client: httpx.AsyncClient,
    *,
    docs_service: Any = None,
) -> List[Dict[str, Any]]:
    """Fetch a Google Doc and convert it into section dicts.

    Raises ``ConfigurationError`` when credentials are missing and
    ``GoogleAPIError`` when the Docs API call fails. Individual inline images
    that fail to download are skipped.
    """
    document = await fetch_document(holder, doc_id, service=docs_service)
    inline_objects = document.get("inlineObjects") or {}
    images = {}
    if inline_objects:
        token = await holder.access_token()
        images = await fetch_inline_images(inline_objects, http_client, token)
    sections = document_to_sections(document, images)
    logger.info(
        "Loaded background document",
        extra={"doc_id": doc_id, "sections": len(sections), "inline_images": len(images)},
    )
    return sections


async def fetch_protocol_rows(sheets: SheetClient, settings: Settings) -> List[ProtocolRecord]:
    """Try the GViz endpoint first; fall back to the CSV export when it fails or yields nothing."""
    sheet_id = settings.protocol_sheet_id
    default_image = settings.default_protocol_image
    try:
        rows = await sheets.fetch_gviz(
            sheet_id,
            gid=settings.protocol_sheet_gid,
            sheet_name=settings.protocol_sheet_name,
        )
        records = normalize_protocols(rows, default_image=default_image)
        if records:
            return records
    except SheetFetchError as exc:
        logger.warning("GViz protocol fetch failed, trying CSV export: %s", exc)

    rows = await sheets.fetch_csv(sheet_id, gid=settings.protocol_sheet_gid)
    return normalize_protocols(rows, default_image=default_image)


async def load_protocols(sheets: SheetClient, settings: Settings) -> List[ProtocolRecord]:
    """Load the protocol catalog; any failure yields an empty list."""
    if not settings.protocol_sheet_id:
        logger.warning("No Google Sheet configured for protocols")
        return []
    try:
        return await fetch_protocol_rows(sheets, settings)
    except SheetFetchError as exc:
        logger.warning("Unable to load protocol sheet, showing empty list: %s", exc)
        return []


async def fetch_category_resources(
    sheets: SheetClient,
    sheet_id: str,
    category: CommunicationCategory,
) -> List[Dict[str, Any]]:
    try:
        rows = await sheets.fetch_gviz(sheet_id, gid=category.gid)
    except SheetFetchError as exc:
        logger.warning("GViz fetch failed for category %s, trying CSV export: %s", category.title, exc)
        rows = []
    if not rows:
        try:
            rows = await sheets.fetch_csv(sheet_id, gid=category.gid)
        except SheetFetchError as exc:
            logger.warning("Unable to load communication category %s: %s", category.title, exc)
            return []
    return [resource.to_dict() for resource in normalize_resources(rows)]


async def load_communication(
    sheets: SheetClient,
    settings: Settings,
    categories: Optional[List[CommunicationCategory]] = None,
) -> List[Dict[str, Any]]:
    """Load every configured category concurrently.

    The result keeps configuration order; a failing category contributes an
    empty resource list instead of failing the whole directory.
    """
    categories = settings.communication_categories if categories is None else categories
    sheet_id = settings.communication_sheet_id
    if not sheet_id or not categories:
        logger.warning("Communication sheet is not configured")
        return []
    results = await asyncio.gather(
        *(fetch_category_resources(sheets, sheet_id, category) for category in categories)
    )
    return [
        {
            "id": category.id,
            "title": category.title,
            "description": category.description,
            "accent": category.accent,
            "resources": resources,
        }
        for category, resources in zip(categories, results)
    ]
