from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page: int
    per_page: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.per_page else 0

    @property
    def first_index(self) -> int:
        """1-based index of the first item shown (0 when empty)."""
        return (self.page - 1) * self.per_page + 1 if self.items else 0

    @property
    def last_index(self) -> int:
        return min(self.page * self.per_page, self.total)

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "per_page": self.per_page,
            "total": self.total,
            "total_pages": self.total_pages,
            "first_index": self.first_index,
            "last_index": self.last_index,
        }


def paginate(items: Sequence[T], *, page: int, per_page: int) -> Page[T]:
    total = len(items)
    pages = max(math.ceil(total / per_page), 1)
    page = min(max(int(page or 1), 1), pages)
    start = (page - 1) * per_page
    return Page(items=list(items[start:start + per_page]), page=page, per_page=per_page, total=total)
