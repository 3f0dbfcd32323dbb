"""
Google Drive link helpers: file-id extraction and direct image URLs.
"""

import logging
import re
from functools import lru_cache
from typing import Optional

from .constants import DEFAULT_PROTOCOL_IMAGE, DRIVE_IMAGE_BASE, DRIVE_IMAGE_SIZE_PARAM

logger = logging.getLogger(__name__)

_PATH_ID_RE = re.compile(r"/d/([a-zA-Z0-9_-]+)")
_QUERY_ID_RE = re.compile(r"[?&]id=([a-zA-Z0-9_-]+)")
_DIRECT_IMAGE_RE = re.compile(r"^https?://lh3\.googleusercontent\.com/d/", re.IGNORECASE)


def is_valid_drive_file_id(file_id: str) -> bool:
    """Check if a string looks like a valid Google Drive file ID.
    Uses a conservative length range (25–44) and allowed chars.
    """
    if not file_id or len(file_id) < 25 or len(file_id) > 44:
        return False
    if not re.match(r"^[a-zA-Z0-9_-]+$", file_id):
        return False
    return True


@lru_cache(maxsize=1024)
def extract_drive_id(value: str) -> Optional[str]:
    """Return the Drive file id in a share link (``/d/<id>`` or ``?id=<id>``) or a bare id."""
    if not value:
        return None
    match = _PATH_ID_RE.search(value)
    if match:
        return match.group(1)
    match = _QUERY_ID_RE.search(value)
    if match:
        return match.group(1)
    if is_valid_drive_file_id(value):
        return value
    return None


def drive_image_url(file_id: str) -> str:
    return f"{DRIVE_IMAGE_BASE}{file_id}{DRIVE_IMAGE_SIZE_PARAM}"


def normalize_image_url(value: Optional[str], default: str = DEFAULT_PROTOCOL_IMAGE) -> str:
    """Rewrite Drive links into a directly viewable image URL.

    Empty values fall back to ``default``; values that are not Drive links
    (including anything unparseable) are returned unchanged.
    """
    trimmed = (value or "").strip()
    if not trimmed:
        return default
    if _DIRECT_IMAGE_RE.match(trimmed):
        return trimmed
    file_id = extract_drive_id(trimmed)
    if file_id:
        logger.debug("Rewrote Drive image link", extra={"drive_file_id": file_id})
        return drive_image_url(file_id)
    return trimmed
