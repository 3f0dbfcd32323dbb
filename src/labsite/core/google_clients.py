"""Google service-account access for the Docs API and inline image content."""

from __future__ import annotations

import asyncio
import base64
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httplib2
import httpx
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp  # type: ignore
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .constants import DEFAULT_INLINE_IMAGE_TYPE, GOOGLE_DOCS_SCOPES
from .google_docs_html import InlineImage

logger = logging.getLogger(__name__)


class GoogleAPIError(Exception):
    """Base error for Google API issues."""


class ConfigurationError(GoogleAPIError):
    """Service credentials or document settings are missing."""


def normalize_private_key(value: Optional[str]) -> str:
    """Restore newlines in a private key stored with literal ``\\n`` sequences."""
    return (value or "").replace("\\n", "\n")


class GoogleCredentialHolder:
    """Lazily built service-account credentials, shared for the process lifetime.

    The holder is created once (by the app factory or the CLI) and passed to
    whatever needs Google access. Credentials are only built on first use, so
    endpoints that never touch Google work without them being configured.
    """

    def __init__(
        self,
        client_email: Optional[str],
        private_key: Optional[str],
        *,
        scopes: Sequence[str] = GOOGLE_DOCS_SCOPES,
    ):
        self.client_email = (client_email or "").strip()
        self.private_key = normalize_private_key(private_key)
        self.scopes = list(scopes)
        self._credentials: Optional[service_account.Credentials] = None
        self._docs_service: Any = None

    @property
    def configured(self) -> bool:
        return bool(self.client_email and self.private_key)

    def get_credentials(self) -> service_account.Credentials:
        if self._credentials is not None:
            return self._credentials
        if not self.configured:
            raise ConfigurationError("Google service account credentials are not configured.")
        try:
            self._credentials = service_account.Credentials.from_service_account_info(
                {
                    "type": "service_account",
                    "client_email": self.client_email,
                    "private_key": self.private_key,
                    "token_uri": "https://oauth2.googleapis.com/token",
                },
                scopes=self.scopes,
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid Google service account credentials: {exc}") from exc
        return self._credentials

    async def access_token(self) -> str:
        """Return a valid bearer token, refreshing it off the event loop when needed."""
        credentials = self.get_credentials()
        if not credentials.valid:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, credentials.refresh, Request())
        return credentials.token

    def docs_service(self) -> Any:
        """Docs v1 service, built once per holder."""
        if self._docs_service is None:
            self._docs_service = build("docs", "v1", credentials=self.get_credentials(), cache_discovery=False)
        return self._docs_service

    def authorized_http(self) -> AuthorizedHttp:
        """A fresh authorized transport for one request; ``httplib2.Http`` is not thread-safe."""
        return AuthorizedHttp(self.get_credentials(), http=httplib2.Http())


def _execute_docs_request(request: Any, document_id: str, http: Optional[AuthorizedHttp]) -> Dict[str, Any]:
    try:
        if http is None:
            return request.execute()
        return request.execute(http=http)
    except HttpError as exc:
        status = getattr(getattr(exc, "resp", None), "status", None)
        raise GoogleAPIError(f"Docs API request failed for {document_id} (HTTP {status}): {exc}") from exc


async def fetch_document(holder: GoogleCredentialHolder, document_id: str, *, service: Any = None) -> Dict[str, Any]:
    """Fetch the structural JSON of a Google Doc.

    The blocking ``documents().get()`` call runs in the default executor. With
    the holder's shared service each call gets its own authorized transport;
    an injected ``service`` executes on whatever transport it was built with.
    """
    if service is None:
        request = holder.docs_service().documents().get(documentId=document_id)
        http: Optional[AuthorizedHttp] = holder.authorized_http()
    else:
        request = service.documents().get(documentId=document_id)
        http = None
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _execute_docs_request, request, document_id, http)


def image_sources(inline_objects: Optional[Mapping[str, Any]]) -> List[tuple]:
    """List ``(object_id, content_uri, description)`` for embedded images."""
    sources = []
    for object_id, obj in (inline_objects or {}).items():
        properties = obj.get("inlineObjectProperties") if isinstance(obj, dict) else None
        embedded = properties.get("embeddedObject") if isinstance(properties, dict) else None
        if not isinstance(embedded, dict):
            continue
        image_props = embedded.get("imageProperties")
        content_uri = image_props.get("contentUri") if isinstance(image_props, dict) else None
        if not content_uri or not isinstance(content_uri, str):
            continue
        description = embedded.get("description")
        sources.append((object_id, content_uri, description if isinstance(description, str) else ""))
    return sources


async def _fetch_image(
    client: httpx.AsyncClient,
    object_id: str,
    content_uri: str,
    description: str,
    headers: Dict[str, str],
) -> Optional[InlineImage]:
    try:
        response = await client.get(content_uri, headers=headers, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Unable to fetch inline image %s: %s", object_id, exc)
        return None
    content_type = response.headers.get("content-type") or DEFAULT_INLINE_IMAGE_TYPE
    payload = base64.b64encode(response.content).decode("ascii")
    return InlineImage(data_url=f"data:{content_type};base64,{payload}", alt=description)


async def fetch_inline_images(
    inline_objects: Optional[Mapping[str, Any]],
    client: httpx.AsyncClient,
    access_token: Optional[str] = None,
) -> Dict[str, InlineImage]:
    """Resolve every embedded image concurrently; failed images are left out."""
    sources = image_sources(inline_objects)
    if not sources:
        return {}
    headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
    results = await asyncio.gather(
        *(_fetch_image(client, object_id, uri, alt, headers) for object_id, uri, alt in sources)
    )
    return {
        object_id: image
        for (object_id, _, _), image in zip(sources, results)
        if image is not None
    }
