"""
Query engine.
Derives a displayable page from the full snapshot: filter, then sort, then paginate.
"""
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

from catalog.errors import InvalidQueryError
from catalog.models.product import Product, Snapshot, _is_integer, attribute_name

DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class QuerySpec:
    """Read-side parameters for one page; recomputed from view state, never persisted."""
    search_term: str = ""
    sort_key: Optional[str] = None
    sort_descending: bool = False
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class Page:
    """A bounded, ordered slice of the filtered and sorted catalog."""
    items: Tuple[Product, ...] = field(default_factory=tuple)
    total_count: int = 0
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def page_count(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.page_index > 0

    @property
    def has_next(self) -> bool:
        return self.page_index + 1 < self.page_count

    def to_dict(self) -> dict:
        return {
            "items": [product.to_dict() for product in self.items],
            "total": self.total_count,
            "page": self.page_index,
            "page_size": self.page_size,
            "page_count": self.page_count,
        }


def validate(spec: QuerySpec) -> Optional[str]:
    """Check a spec, returning the resolved sort attribute (or None)."""
    if not _is_integer(spec.page_size) or spec.page_size <= 0:
        raise InvalidQueryError(f"page_size must be a positive integer, got {spec.page_size!r}")
    if not _is_integer(spec.page_index) or spec.page_index < 0:
        raise InvalidQueryError(f"page_index must be a non-negative integer, got {spec.page_index!r}")
    if not isinstance(spec.search_term, str):
        raise InvalidQueryError("search_term must be a string")
    if spec.sort_key is None:
        return None
    attr = attribute_name(spec.sort_key)
    if attr is None:
        raise InvalidQueryError(f"Unknown sort key: {spec.sort_key!r}")
    return attr


def matches(product: Product, term: str) -> bool:
    """Case-insensitive substring match against title or brand."""
    needle = term.lower()
    return needle in product.title.lower() or needle in product.brand.lower()


def derive(snapshot: Snapshot, spec: QuerySpec) -> Page:
    """
    Produce the page described by spec. Pure; same inputs, same page.

    total_count is the number of matches before pagination, so a
    page_index past the end gives empty items with the real count.
    """
    sort_attr = validate(spec)

    if spec.search_term:
        products = [p for p in snapshot if matches(p, spec.search_term)]
    else:
        products = list(snapshot)

    if sort_attr is not None:
        # sorted() is stable in both directions, ties keep snapshot order
        products = sorted(
            products,
            key=lambda p: getattr(p, sort_attr),
            reverse=spec.sort_descending
        )

    start = spec.page_index * spec.page_size
    items = tuple(products[start:start + spec.page_size])

    return Page(
        items=items,
        total_count=len(products),
        page_index=spec.page_index,
        page_size=spec.page_size
    )
