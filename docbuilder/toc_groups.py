"""Data models for grouped table-of-contents listings."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from docbuilder.api_models import DeclaredIn, TocItem


def sort_by_index_title(items: Iterable[TocItem]) -> list[TocItem]:
    """Order items case-insensitively by index title."""
    return sorted(items, key=lambda item: item.titles.index_title.lower())


@dataclass
class DeclaredInGroup:
    """Members declared by the same ancestor, the subject itself, or attached."""

    declared_in: DeclaredIn | None
    items: list[TocItem] = field(default_factory=list)
    attached: bool = False

    def sort_items(self) -> None:
        self.items = sort_by_index_title(self.items)


@dataclass
class TocTypeGroup:
    """Members of one category on a namespace-level page."""

    type: str
    title: str
    items: list[TocItem] = field(default_factory=list)
