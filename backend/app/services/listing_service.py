"""
Listing Service - Filter, sort and paginate the loaded catalog

Read-only over the catalog: it never changes products or prices,
it only decides which ones are shown and in what order.

Author: TM3
Date: 2025-11-18
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from app.core.config import settings
from app.domain.product import BaseProduct
from app.services import pricing_service


class SortDirection(str, Enum):
    NONE = "none"
    ASC = "asc"
    DESC = "desc"


# none -> asc -> desc -> none
_NEXT_DIRECTION = {
    SortDirection.NONE: SortDirection.ASC,
    SortDirection.ASC: SortDirection.DESC,
    SortDirection.DESC: SortDirection.NONE,
}


def filter_products(products: Sequence[BaseProduct], query: str) -> List[BaseProduct]:
    """Case-insensitive substring match on name or SKU; empty query keeps everything"""
    needle = (query or "").strip().casefold()
    if not needle:
        return list(products)
    return [
        p for p in products
        if needle in p.name.casefold() or needle in p.sku.casefold()
    ]


def sort_products(products: Sequence[BaseProduct], direction: SortDirection,
                  discount_percentage) -> List[BaseProduct]:
    """
    Order by discounted price

    sorted() is stable, so equal prices keep their incoming order in
    both directions (reverse=True preserves stability as well).
    """
    if direction == SortDirection.NONE:
        return list(products)
    return sorted(
        products,
        key=lambda p: pricing_service.discounted_price(p.unit_price, discount_percentage),
        reverse=direction == SortDirection.DESC,
    )


def total_pages(count: int, page_size: int) -> int:
    """At least one page, even for an empty result"""
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, count: int, page_size: int) -> int:
    return min(max(1, page), total_pages(count, page_size))


@dataclass
class ListingPage:
    items: List[BaseProduct]
    page: int
    total_pages: int
    total_count: int
    page_size: int
    query: str
    sort: SortDirection
    discount_percentage: object = 0

    def to_dict(self) -> dict:
        pct = self.discount_percentage
        return {
            'page': self.page,
            'total_pages': self.total_pages,
            'total_count': self.total_count,
            'page_size': self.page_size,
            'query': self.query,
            'sort': self.sort.value,
            'discount_percentage': float(pct),
            'discount_label': pricing_service.discount_label(pct),
            'data': [
                {
                    **product.to_dict(),
                    'list_price': pricing_service.list_price(product.unit_price),
                    'discounted_price': pricing_service.discounted_price(product.unit_price, pct),
                }
                for product in self.items
            ],
        }


@dataclass
class ListingController:
    """
    Listing state for one session: query, sort direction and current page

    The page is clamped every time a view is computed, so narrowing the
    filter never leaves an empty, out-of-range page selected.
    """
    page_size: int = field(default_factory=lambda: settings.LISTING_PAGE_SIZE)
    query: str = ""
    sort: SortDirection = SortDirection.NONE
    page: int = 1

    def __post_init__(self):
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")

    def set_query(self, query: Optional[str]) -> None:
        self.query = query or ""

    def set_page(self, page: int) -> None:
        self.page = page

    def toggle_sort(self) -> SortDirection:
        self.sort = _NEXT_DIRECTION[self.sort]
        return self.sort

    def view(self, products: Sequence[BaseProduct], discount_percentage=0) -> ListingPage:
        """Filter, sort, clamp the page and slice it"""
        filtered = filter_products(products, self.query)
        ordered = sort_products(filtered, self.sort, discount_percentage)

        self.page = clamp_page(self.page, len(ordered), self.page_size)
        start = (self.page - 1) * self.page_size

        return ListingPage(
            items=ordered[start:start + self.page_size],
            page=self.page,
            total_pages=total_pages(len(ordered), self.page_size),
            total_count=len(ordered),
            page_size=self.page_size,
            query=self.query,
            sort=self.sort,
            discount_percentage=discount_percentage,
        )
