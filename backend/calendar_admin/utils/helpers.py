from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, TypeVar
from urllib.parse import urlencode

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: List[T]
    page: int
    page_size: int
    total: int
    total_pages: int

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def _positive_int(value: Optional[str], default: int) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def paginate(items: Sequence[T], page: Optional[str], page_size: Optional[str], *, default_size: int, max_size: int) -> Page[T]:
    size = min(_positive_int(page_size, default_size), max_size)
    total = len(items)
    total_pages = max(1, (total + size - 1) // size)
    current = min(_positive_int(page, 1), total_pages)
    offset = (current - 1) * size
    return Page(
        items=list(items[offset:offset + size]),
        page=current,
        page_size=size,
        total=total,
        total_pages=total_pages,
    )


def query_string(params: dict, **overrides) -> str:
    merged = {**params, **overrides}
    return urlencode({k: v for k, v in merged.items() if v not in (None, "")})
