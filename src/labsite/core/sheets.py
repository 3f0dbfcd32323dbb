"""Google Sheets public export parsing and fetching.

Two wire formats are supported:

- ``gviz``: JSON wrapped in a JavaScript callback
  (``/*O_o*/ google.visualization.Query.setResponse({...});``).
- ``csv``: the plain CSV export.

Both are turned into a list of row mappings (header label -> cell value).
Parsing never raises; malformed payloads produce an empty list so callers
can fall back to the other format.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import httpx

from .constants import SHEETS_BASE_URL

logger = logging.getLogger(__name__)

CellValue = Union[str, int, float, bool, datetime]
Row = Dict[str, CellValue]

_GVIZ_DATE_RE = re.compile(r"^Date\((\d+),(\d+),(\d+)(?:,(\d+),(\d+),(\d+))?\)$")


class SheetFetchError(Exception):
    """Raised when a spreadsheet export cannot be downloaded."""


def decode_gviz_date(value: Any) -> Optional[datetime]:
    """Decode ``Date(y,m,d[,h,mi,s])`` with a zero-based month."""
    if not isinstance(value, str):
        return None
    match = _GVIZ_DATE_RE.match(value)
    if not match:
        return None
    year, month, day = (int(part) for part in match.group(1, 2, 3))
    hour, minute, second = (int(part) if part else 0 for part in match.group(4, 5, 6))
    try:
        return datetime(year, month + 1, day, hour, minute, second)
    except ValueError:
        return None


def _cell_value(cell: Any) -> CellValue:
    if not isinstance(cell, dict):
        return ""
    value = cell.get("v")
    if value is not None and value != "":
        if isinstance(value, str):
            return decode_gviz_date(value) or value
        return value
    formatted = cell.get("f")
    if formatted:
        return decode_gviz_date(formatted) or formatted
    return ""


def _has_content(row: Row) -> bool:
    return any(value for value in row.values())


def parse_gviz_response(raw: Optional[str]) -> List[Row]:
    """Parse a gviz ``tq?tqx=out:json`` response body."""
    if not raw:
        return []
    start = raw.find("{")
    end = raw.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return []
    try:
        payload = json.loads(raw[start : end + 1])
        table = payload["table"]
        columns = [
            ((col or {}).get("label") or f"Column{idx}").strip()
            for idx, col in enumerate(table.get("cols") or [])
        ]
        rows: List[Row] = []
        for row in table.get("rows") or []:
            cells = row.get("c") if isinstance(row, dict) else None
            if not cells:
                continue
            entry: Row = {}
            for idx, cell in enumerate(cells):
                key = columns[idx] if idx < len(columns) else f"Column{idx}"
                entry[key] = _cell_value(cell)
            if _has_content(entry):
                rows.append(entry)
        return rows
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        logger.warning("Unable to parse Google Sheet gviz response: %s", exc)
        return []


def read_csv_records(text: Optional[str]) -> List[List[str]]:
    """Split CSV text into records, skipping blank lines."""
    if not text:
        return []
    try:
        return [record for record in csv.reader(io.StringIO(text, newline="")) if record]
    except csv.Error as exc:
        logger.warning("Unable to parse Google Sheet CSV export: %s", exc)
        return []


def parse_csv(text: Optional[str]) -> List[Row]:
    """Parse a CSV export; the first non-blank row is the header."""
    records = read_csv_records(text)
    if not records:
        return []
    headers = [(cell or "").strip() for cell in records[0]]
    rows: List[Row] = []
    for record in records[1:]:
        if not any(cell.strip() for cell in record):
            continue
        rows.append(
            {
                header: (record[idx].strip() if idx < len(record) else "")
                for idx, header in enumerate(headers)
            }
        )
    return rows


def gviz_url(sheet_id: str) -> str:
    return f"{SHEETS_BASE_URL}/{sheet_id}/gviz/tq"


def csv_url(sheet_id: str) -> str:
    return f"{SHEETS_BASE_URL}/{sheet_id}/export"


class SheetClient:
    """Fetch public spreadsheet exports over an ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient):
        self._client = client

    async def _get_text(self, url: str, params: Dict[str, str], label: str) -> str:
        try:
            response = await self._client.get(url, params=params, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SheetFetchError(f"{label} fetch failed: {exc.response.status_code}") from exc
        except httpx.RequestError as exc:
            raise SheetFetchError(f"{label} fetch failed: {exc}") from exc
        return response.text

    async def fetch_gviz(
        self,
        sheet_id: str,
        *,
        gid: Optional[str] = None,
        sheet_name: Optional[str] = None,
    ) -> List[Row]:
        params = {"tqx": "out:json"}
        if gid:
            params["gid"] = str(gid)
        elif sheet_name:
            params["sheet"] = sheet_name
        body = await self._get_text(gviz_url(sheet_id), params, "GViz")
        return parse_gviz_response(body)

    async def fetch_csv(self, sheet_id: str, *, gid: Optional[str] = None) -> List[Row]:
        params = {"format": "csv", "gid": str(gid) if gid else "0"}
        body = await self._get_text(csv_url(sheet_id), params, "CSV")
        return parse_csv(body)
