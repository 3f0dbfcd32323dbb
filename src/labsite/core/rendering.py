"""HTML rendering for the background, protocols and communication widgets."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from jinja2 import Environment, PackageLoader, select_autoescape

from .constants import DEFAULT_PROTOCOL_IMAGE
from .search import CardFilter, FilterResult, search_text

DATE_TBD = "Date TBD"
_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%B %d, %Y", "%b %d, %Y", "%d %B %Y", "%d %b %Y")


def _short_date(value: date) -> str:
    return f"{value:%b %d %Y}"


def format_updated(value: Any) -> str:
    """Format a protocol's "updated" value as ``Jan 05 2024``."""
    if value is None or value == "":
        return DATE_TBD
    if isinstance(value, (datetime, date)):
        return _short_date(value)
    text = str(value).strip()
    if not text:
        return DATE_TBD
    try:
        return _short_date(datetime.fromisoformat(text))
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return _short_date(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return text


def _build_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("labsite", "templates"),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["format_updated"] = format_updated
    return env


templates = _build_environment()


def render_background(sections: Sequence[Mapping[str, Any]], *, error: bool = False) -> str:
    """Render sections (``Section.to_dict()`` shape) with their navigation list."""
    return templates.get_template("background.html").render(sections=list(sections), error=error)


def filter_protocols(protocols: Sequence[Any], query: Optional[str] = None) -> FilterResult:
    return CardFilter(protocols, key=search_text).apply(query)


def render_protocols(
    protocols: Sequence[Any],
    *,
    query: Optional[str] = None,
    default_image: str = DEFAULT_PROTOCOL_IMAGE,
    error: bool = False,
) -> str:
    result = filter_protocols(protocols, query)
    return templates.get_template("protocols.html").render(
        result=result,
        query=query or "",
        default_image=default_image,
        error=error,
    )


def render_communication(categories: Sequence[Mapping[str, Any]], *, error: bool = False) -> str:
    """Render category blocks; each category mapping carries its ``resources``."""
    items: List[Dict[str, Any]] = [dict(category) for category in categories]
    has_resources = any(category.get("resources") for category in items)
    return templates.get_template("communication.html").render(
        categories=items,
        show_empty_state=error or not has_resources,
    )
