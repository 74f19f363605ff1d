"""Page slicing helpers shared by the HTTP API and the terminal browser.

Page indexes are 0-based here. Front-ends that number pages from 1 convert
with :func:`page_index_from_number` before calling in. ``page_size`` must be
at least 1; callers validate it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar

T = TypeVar("T")


def total_pages(count: int, page_size: int) -> int:
    """Number of pages needed for ``count`` items, 0 when there are none."""
    return -(-count // page_size)


def slice_page(items: Sequence[T], page_index: int, page_size: int) -> List[T]:
    """Return the items on page ``page_index``.

    A page past the end, or a negative index, yields an empty list.
    """
    if page_index < 0:
        return []
    start = page_index * page_size
    return list(items[start : start + page_size])


def page_index_from_number(page_number: int) -> int:
    """Convert a 1-based page number to a 0-based page index."""
    return page_number - 1


@dataclass(slots=True)
class Page(Generic[T]):
    index: int
    size: int
    items: List[T]
    total: int
    total_pages: int

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def has_next(self) -> bool:
        return self.index + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.index > 0


def paginate(items: Sequence[T], page_index: int, page_size: int) -> Page[T]:
    return Page(
        index=page_index,
        size=page_size,
        items=slice_page(items, page_index, page_size),
        total=len(items),
        total_pages=total_pages(len(items), page_size),
    )
