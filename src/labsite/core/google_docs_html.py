"""Helpers for turning a Google Docs API payload into an HTML section tree.

The Docs ``body.content`` list is walked in order. Major headings open a
section, minor headings open a subsection inside the current section, and every
other paragraph becomes an HTML block on whichever target is open. Consecutive
bullet paragraphs that share a list id are buffered and emitted as one ``<ul>``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .constants import (
    MAJOR_HEADING_STYLES,
    MINOR_HEADING_STYLES,
    OVERVIEW_TITLE,
    UNTITLED_SECTION,
    UNTITLED_SUBSECTION,
)
from .inline_style import InlineStyle, escape_attr, escape_html, render_html

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class InlineImage:
    data_url: str
    alt: str = ""

    def to_html(self) -> str:
        return f'<img src="{self.data_url}" alt="{escape_attr(self.alt)}" class="inline-image">'


def slugify(text: Optional[str]) -> str:
    base = _NON_ALNUM_RE.sub("-", (text or "").lower()).strip("-")
    return base or "section"


class SlugRegistry:
    """Document-scoped slug counter: ``base``, ``base-2``, ``base-3``..."""

    def __init__(self) -> None:
        self._counts: Dict[str, int] = {}

    def register(self, text: Optional[str]) -> str:
        base = slugify(text)
        count = self._counts.get(base, 0) + 1
        self._counts[base] = count
        if count > 1:
            return f"{base}-{count}"
        return base


@dataclass
class _PendingList:
    list_id: Optional[str]
    items: List[str] = field(default_factory=list)


class BlockList:
    """Ordered HTML blocks with at most one open bullet list."""

    def __init__(self) -> None:
        self.blocks: List[str] = []
        self._pending: Optional[_PendingList] = None

    def flush(self) -> None:
        pending, self._pending = self._pending, None
        if pending and pending.items:
            items = "".join(f"<li>{item}</li>" for item in pending.items)
            self.blocks.append(f"<ul>{items}</ul>")

    def append_paragraph(self, html: str) -> None:
        if not html:
            return
        self.flush()
        self.blocks.append(f"<p>{html}</p>")

    def append_list_item(self, list_id: Optional[str], html: str) -> None:
        if self._pending is None or self._pending.list_id != list_id:
            self.flush()
            self._pending = _PendingList(list_id)
        self._pending.items.append(html or "")


@dataclass
class Subsection:
    title: str
    id: str
    content: BlockList = field(default_factory=BlockList)

    @property
    def blocks(self) -> List[str]:
        return self.content.blocks

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "id": self.id, "blocks": list(self.blocks)}


@dataclass
class Section:
    title: str
    id: str
    content: BlockList = field(default_factory=BlockList)
    subsections: List[Subsection] = field(default_factory=list)

    @property
    def blocks(self) -> List[str]:
        return self.content.blocks

    def flush(self) -> None:
        self.content.flush()
        for sub in self.subsections:
            sub.content.flush()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "id": self.id,
            "blocks": list(self.blocks),
            "subsections": [sub.to_dict() for sub in self.subsections],
        }


def _elements(paragraph: Mapping[str, Any]) -> List[Any]:
    elements = paragraph.get("elements")
    return elements if isinstance(elements, list) else []


def render_element(element: Any, inline_images: Mapping[str, InlineImage]) -> str:
    if not isinstance(element, dict):
        return ""
    text_run = element.get("textRun")
    if isinstance(text_run, dict):
        content = text_run.get("content")
        if not isinstance(content, str) or not content.strip():
            return ""
        style = InlineStyle.from_text_style(text_run.get("textStyle"))
        return render_html(escape_html(content.replace("\n", "")), style)
    inline_object = element.get("inlineObjectElement")
    if isinstance(inline_object, dict):
        object_id = inline_object.get("inlineObjectId")
        image = inline_images.get(object_id) if isinstance(object_id, str) else None
        if image is not None:
            return image.to_html()
    return ""


def render_paragraph(paragraph: Mapping[str, Any], inline_images: Mapping[str, InlineImage]) -> str:
    """Render a paragraph's inline elements as trimmed HTML."""
    return "".join(render_element(el, inline_images) for el in _elements(paragraph)).strip()


def paragraph_text(paragraph: Mapping[str, Any]) -> str:
    """Plain text of a paragraph with whitespace collapsed."""
    parts = []
    for element in _elements(paragraph):
        text_run = element.get("textRun") if isinstance(element, dict) else None
        content = text_run.get("content") if isinstance(text_run, dict) else None
        if isinstance(content, str):
            parts.append(content)
    return " ".join("".join(parts).split())


def _named_style(paragraph: Mapping[str, Any]) -> str:
    style = paragraph.get("paragraphStyle")
    if not isinstance(style, dict):
        return ""
    named = style.get("namedStyleType")
    return named if isinstance(named, str) else ""


def build_sections(
    content: Optional[List[Any]],
    inline_images: Optional[Mapping[str, InlineImage]] = None,
) -> List[Section]:
    """Build the section tree for a document body.

    Args:
        content: ``document["body"]["content"]``; ``None`` yields no sections.
        inline_images: Resolved inline images keyed by inline object id.
            Objects missing from the mapping render nothing.
    """
    images = inline_images or {}
    slugs = SlugRegistry()
    sections: List[Section] = []
    current_section: Optional[Section] = None
    target: Optional[BlockList] = None

    for item in content or []:
        paragraph = item.get("paragraph") if isinstance(item, dict) else None
        if not isinstance(paragraph, dict):
            continue
        named_style = _named_style(paragraph)

        if named_style in MAJOR_HEADING_STYLES:
            if target is not None:
                target.flush()
            title = paragraph_text(paragraph) or UNTITLED_SECTION
            current_section = Section(title=title, id=slugs.register(title))
            sections.append(current_section)
            target = current_section.content
            continue

        if named_style in MINOR_HEADING_STYLES and current_section is not None:
            target.flush()
            plain = paragraph_text(paragraph)
            subsection = Subsection(
                title=plain or UNTITLED_SUBSECTION,
                id=slugs.register(plain or "subsection"),
            )
            current_section.subsections.append(subsection)
            target = subsection.content
            continue

        if current_section is None:
            current_section = Section(title=OVERVIEW_TITLE, id=slugs.register("overview"))
            sections.append(current_section)
            target = current_section.content

        html = render_paragraph(paragraph, images)
        bullet = paragraph.get("bullet")
        if isinstance(bullet, dict):
            target.append_list_item(bullet.get("listId"), html)
        else:
            target.append_paragraph(html)

    for section in sections:
        section.flush()
    return sections


def document_to_sections(
    document: Mapping[str, Any],
    inline_images: Optional[Mapping[str, InlineImage]] = None,
) -> List[Dict[str, Any]]:
    """Convert a full ``documents.get`` payload into JSON-ready section dicts."""
    body = document.get("body") if isinstance(document, dict) else None
    content = body.get("content") if isinstance(body, dict) else None
    return [section.to_dict() for section in build_sections(content, inline_images)]

