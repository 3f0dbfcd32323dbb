"""Substring search over rendered cards.

Each item gets a precomputed lowercase search string. Applying a query
classifies items as matches or non-matches; matches are moved ahead of
non-matches with each group keeping its original relative order (a stable
partition). An empty query restores the original order with every item
visible.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")

PROTOCOL_SEARCH_FIELDS = ("title",)


def search_text(item: Any, fields: Sequence[str] = PROTOCOL_SEARCH_FIELDS) -> str:
    """Lowercased concatenation of the searchable fields of ``item``."""
    parts = []
    for name in fields:
        value = item.get(name) if isinstance(item, dict) else getattr(item, name, None)
        if value:
            parts.append(str(value))
    return " ".join(parts).lower()


@dataclass
class FilterEntry(Generic[T]):
    item: T
    search: str
    visible: bool = True


@dataclass
class FilterResult(Generic[T]):
    query: str
    entries: List[FilterEntry[T]]
    match_count: int
    show_empty_state: bool

    @property
    def ordered(self) -> List[T]:
        return [entry.item for entry in self.entries]

    @property
    def visible(self) -> List[T]:
        return [entry.item for entry in self.entries if entry.visible]


class CardFilter(Generic[T]):
    """Live filter over a fixed list of items."""

    def __init__(self, items: Sequence[T], key: Optional[Callable[[T], str]] = None):
        key = key or search_text
        self._entries = [(item, (key(item) or "").lower()) for item in items]

    def __len__(self) -> int:
        return len(self._entries)

    def apply(self, query: Optional[str]) -> FilterResult[T]:
        needle = (query or "").strip().lower()
        if not needle:
            entries = [FilterEntry(item, search) for item, search in self._entries]
            return FilterResult(
                query="",
                entries=entries,
                match_count=len(entries),
                show_empty_state=not entries,
            )

        matches: List[FilterEntry[T]] = []
        non_matches: List[FilterEntry[T]] = []
        for item, search in self._entries:
            if needle in search:
                matches.append(FilterEntry(item, search, visible=True))
            else:
                non_matches.append(FilterEntry(item, search, visible=False))
        return FilterResult(
            query=needle,
            entries=matches + non_matches,
            match_count=len(matches),
            show_empty_state=not matches,
        )


def apply_filter(
    items: Sequence[T],
    query: Optional[str],
    key: Optional[Callable[[T], str]] = None,
) -> FilterResult[T]:
    return CardFilter(items, key=key).apply(query)
