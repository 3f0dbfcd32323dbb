"""Inline text styling for Google Docs text runs.

A text run's style is reduced to a small set of flags. The flags are applied
in a fixed nesting order, link outermost and the baseline offset innermost,
so a bold link always renders as ``<a><strong>text</strong></a>`` regardless
of how the export lists the style keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from html import escape
from typing import Any, List, NamedTuple, Optional, Tuple


class BaselineOffset(str, Enum):
    NONE = "NONE"
    SUPERSCRIPT = "SUPERSCRIPT"
    SUBSCRIPT = "SUBSCRIPT"


class Wrapper(NamedTuple):
    """An element that wraps styled text: tag name plus attributes."""

    tag: str
    attrs: Tuple[Tuple[str, str], ...] = ()


def escape_html(text: Optional[str]) -> str:
    return escape(text or "", quote=True)


def escape_attr(value: Optional[str]) -> str:
    return escape_html(value).replace("`", "&#96;")


@dataclass(frozen=True)
class InlineStyle:
    link: Optional[str] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    baseline: BaselineOffset = BaselineOffset.NONE

    @classmethod
    def from_text_style(cls, text_style: Any) -> "InlineStyle":
        """Build a style from a Docs ``textStyle`` mapping (missing keys are unset)."""
        if not isinstance(text_style, dict):
            return cls()
        link = text_style.get("link")
        url = link.get("url") if isinstance(link, dict) else None
        if not isinstance(url, str):
            url = None
        try:
            baseline = BaselineOffset(text_style.get("baselineOffset") or "NONE")
        except ValueError:
            baseline = BaselineOffset.NONE
        return cls(
            link=url or None,
            bold=bool(text_style.get("bold")),
            italic=bool(text_style.get("italic")),
            underline=bool(text_style.get("underline")),
            strikethrough=bool(text_style.get("strikethrough")),
            baseline=baseline,
        )

    def wrappers(self) -> List[Wrapper]:
        """Return the wrapping elements, outermost first."""
        out: List[Wrapper] = []
        if self.link:
            out.append(Wrapper("a", (("href", self.link), ("target", "_blank"), ("rel", "noopener"))))
        if self.bold:
            out.append(Wrapper("strong"))
        if self.italic:
            out.append(Wrapper("em"))
        if self.underline:
            out.append(Wrapper("u"))
        if self.strikethrough:
            out.append(Wrapper("s"))
        if self.baseline is BaselineOffset.SUPERSCRIPT:
            out.append(Wrapper("sup"))
        elif self.baseline is BaselineOffset.SUBSCRIPT:
            out.append(Wrapper("sub"))
        return out


def _open_tag(wrapper: Wrapper) -> str:
    attrs = "".join(f' {name}="{escape_attr(value)}"' for name, value in wrapper.attrs)
    return f"<{wrapper.tag}{attrs}>"


def render_html(text_html: str, style: InlineStyle) -> str:
    """Wrap already-escaped text in the style's elements."""
    if not text_html:
        return ""
    html = text_html
    for wrapper in reversed(style.wrappers()):
        html = f"{_open_tag(wrapper)}{html}</{wrapper.tag}>"
    return html
