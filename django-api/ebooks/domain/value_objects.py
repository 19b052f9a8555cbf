"""Catalog query primitives."""

from dataclasses import dataclass

ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class SearchCriteria:
    """Case-insensitive term over title and author, optional category."""

    term: str = ""
    category: str = ALL_CATEGORIES

    def __post_init__(self) -> None:
        object.__setattr__(self, "term", (self.term or "").strip())
        object.__setattr__(self, "category", (self.category or "").strip() or ALL_CATEGORIES)

    @property
    def filters_category(self) -> bool:
        return self.category != ALL_CATEGORIES


@dataclass(frozen=True)
class PageRequest:
    """Requested page, normalized to sane bounds."""

    page: int = 1
    page_size: int = 12

    MAX_PAGE_SIZE = 50

    def __post_init__(self) -> None:
        object.__setattr__(self, "page", max(1, self.page))
        object.__setattr__(self, "page_size", min(max(1, self.page_size), self.MAX_PAGE_SIZE))
