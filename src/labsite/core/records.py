"""Normalize spreadsheet rows into resource and protocol records.

Sheets are edited by hand, so header spellings drift. Each target field is
resolved from an explicit, prioritized list of header aliases: exact header
matches are tried first (in alias order), then case-insensitive matches.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union
from urllib.parse import unquote, urlparse

from .constants import DEFAULT_PROTOCOL_IMAGE
from .drive_utils import normalize_image_url
from .sheets import CellValue

logger = logging.getLogger(__name__)

RESOURCE_LINK_FIELDS = ("Link", "URL", "Resource Link", "Resource", "Website")
RESOURCE_TITLE_FIELDS = ("Title", "Name", "Resource", "Topic", "Headline")
RESOURCE_SUMMARY_FIELDS = ("Description", "Summary", "Notes", "Details")
RESOURCE_TAG_FIELDS = ("Tags", "Category")

PROTOCOL_TITLE_FIELDS = ("Title",)
PROTOCOL_UPDATED_FIELDS = ("Updated", "Date")
PROTOCOL_SUMMARY_FIELDS = ("Summary", "Description")
PROTOCOL_IMAGE_FIELDS = ("Image", "Image Link")
PROTOCOL_LINK_FIELDS = ("Link", "Protocol Link")

DEFAULT_RESOURCE_TITLE = "Resource"
DEFAULT_PROTOCOL_LINK = "#"

_URL_RE = re.compile(r"https?://\S+", re.IGNORECASE)
_EXTENSION_RE = re.compile(r"\.[a-z0-9]+$", re.IGNORECASE)
_SEPARATOR_RE = re.compile(r"[-_]+")


@dataclass
class ResourceRecord:
    title: str
    summary: str = ""
    link: str = ""
    tags: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ProtocolRecord:
    title: str
    updated: Union[datetime, str] = ""
    summary: str = ""
    image: str = DEFAULT_PROTOCOL_IMAGE
    link: str = DEFAULT_PROTOCOL_LINK
    category: str = ""
    tags: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _as_text(value: CellValue) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def resolve_value(row: Mapping[str, CellValue], aliases: Sequence[str]) -> Optional[CellValue]:
    """Return the raw value of the first alias present with a non-empty value."""
    for alias in aliases:
        if alias in row and not _is_empty(row[alias]):
            return row[alias]
    lowered = {}
    for key in row:
        lowered.setdefault(key.lower(), key)
    for alias in aliases:
        key = lowered.get(alias.lower())
        if key is not None and not _is_empty(row[key]):
            return row[key]
    return None


def resolve_field(row: Mapping[str, CellValue], aliases: Sequence[str]) -> str:
    value = resolve_value(row, aliases)
    return "" if value is None else _as_text(value)


def first_value(row: Mapping[str, CellValue]) -> str:
    for value in row.values():
        if not _is_empty(value):
            return _as_text(value)
    return ""


def find_first_url(row: Mapping[str, CellValue]) -> str:
    for value in row.values():
        if isinstance(value, str):
            match = _URL_RE.search(value)
            if match:
                return match.group(0)
    return ""


def _title_case(value: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in value.lower().split(" ") if word)


def humanize_slug(slug: str) -> str:
    if not slug:
        return ""
    return " ".join(_SEPARATOR_RE.sub(" ", unquote(slug)).split())


def title_from_url(url: Optional[str]) -> str:
    """Derive a readable title from the last path segment (or host) of ``url``.

    Opaque links such as ``mailto:`` use their path, so ``mailto:lab@example.org``
    becomes ``Lab@example``.
    """
    if not url:
        return DEFAULT_RESOURCE_TITLE
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname or ""
    except ValueError:
        return url
    if not parsed.scheme or (parsed.scheme in ("http", "https") and not hostname):
        return url
    host = re.sub(r"^www\.", "", hostname)
    segments = [segment for segment in parsed.path.split("/") if segment]
    base = segments[-1] if segments else host
    humanized = humanize_slug(_EXTENSION_RE.sub("", base))
    return _title_case(humanized) if humanized else host


def normalize_resource(row: Optional[Mapping[str, CellValue]]) -> Optional[ResourceRecord]:
    """Normalize a communication directory row; ``None`` when nothing usable remains."""
    if not row or not first_value(row):
        return None
    link = resolve_field(row, RESOURCE_LINK_FIELDS).strip()
    if not link:
        link = find_first_url(row)
    link = link.strip()
    title = resolve_field(row, RESOURCE_TITLE_FIELDS).strip()
    summary = resolve_field(row, RESOURCE_SUMMARY_FIELDS).strip()
    tags = resolve_field(row, RESOURCE_TAG_FIELDS).strip()

    if not title and summary:
        title, summary = summary, ""
    if not title and link:
        title = title_from_url(link)
    if not title:
        title = first_value(row) or DEFAULT_RESOURCE_TITLE

    if not title and not link:
        return None
    return ResourceRecord(title=title, summary=summary, link=link, tags=tags)


def normalize_protocol(
    row: Optional[Mapping[str, CellValue]],
    *,
    default_image: str = DEFAULT_PROTOCOL_IMAGE,
) -> Optional[ProtocolRecord]:
    """Normalize a protocol sheet row; rows without a title are dropped."""
    if not row:
        return None
    title = resolve_field(row, PROTOCOL_TITLE_FIELDS).strip()
    if not title:
        return None
    updated = resolve_value(row, PROTOCOL_UPDATED_FIELDS)
    if not isinstance(updated, datetime):
        updated = "" if updated is None else _as_text(updated).strip()
    return ProtocolRecord(
        title=title,
        updated=updated,
        summary=resolve_field(row, PROTOCOL_SUMMARY_FIELDS).strip(),
        image=normalize_image_url(resolve_field(row, PROTOCOL_IMAGE_FIELDS), default=default_image),
        link=resolve_field(row, PROTOCOL_LINK_FIELDS).strip() or DEFAULT_PROTOCOL_LINK,
    )


def normalize_resources(rows: Iterable[Mapping[str, CellValue]]) -> List[ResourceRecord]:
    return [record for record in (normalize_resource(row) for row in rows) if record is not None]


def normalize_protocols(
    rows: Iterable[Mapping[str, CellValue]],
    *,
    default_image: str = DEFAULT_PROTOCOL_IMAGE,
) -> List[ProtocolRecord]:
    records = []
    for row in rows:
        record = normalize_protocol(row, default_image=default_image)
        if record is None:
            logger.debug("Skipping protocol row without a title")
            continue
        records.append(record)
    return records
