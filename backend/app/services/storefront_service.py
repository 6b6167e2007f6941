"""
Storefront Service - Session context for catalog, discount and cart

Owns one instance of each collaborator and defines their lifecycle:
- start(): read the discount once, load the stored cart
- reload_catalog(): full catalog fetch (never cached between loads)
- refresh_discount(): explicit re-read after an admin update

Author: TM3
Date: 2025-11-18
"""
import logging
from typing import Dict, Optional

from app.domain.product import BaseProduct
from app.services.cart_service import CartStore
from app.services.catalog_service import CatalogFetcher, CatalogLoadResult, ProgressCallback
from app.services.discount_service import DiscountProvider
from app.services.listing_service import ListingController, ListingPage

logger = logging.getLogger(__name__)


class Storefront:
    """Explicit replacement for page-level global discount and cart state"""

    def __init__(self, catalog: CatalogFetcher = None, discount: DiscountProvider = None,
                 cart: CartStore = None, listing: ListingController = None):
        self.catalog = catalog if catalog is not None else CatalogFetcher()
        self.discount = discount if discount is not None else DiscountProvider()
        self.cart = cart if cart is not None else CartStore()
        self.listing = listing if listing is not None else ListingController()
        self._index: Dict[str, BaseProduct] = {}
        self._index_generation = None

    def start(self) -> None:
        reading = self.discount.refresh()
        items = self.cart.load()
        logger.info(f"Storefront started: discount {reading.percentage}% ({reading.status.value}), "
                    f"{items} cart items")

    async def reload_catalog(self, on_progress: Optional[ProgressCallback] = None) -> CatalogLoadResult:
        return await self.catalog.load(on_progress=on_progress)

    def refresh_discount(self):
        return self.discount.refresh()

    @property
    def discount_percentage(self):
        return self.discount.current_percentage

    def find_product(self, sku: str) -> Optional[BaseProduct]:
        """Look a SKU up in the loaded catalog, falling back to the cart's copy"""
        if self._index_generation != self.catalog.generation or len(self._index) != len(self.catalog.products):
            self._index = {p.sku: p for p in self.catalog.products}
            self._index_generation = self.catalog.generation

        product = self._index.get(sku)
        if product is None:
            item = self.cart.get(sku)
            product = item.product if item else None
        return product

    def listing_page(self, query: Optional[str] = None, page: Optional[int] = None) -> ListingPage:
        if query is not None:
            self.listing.set_query(query)
        if page is not None:
            self.listing.set_page(page)
        return self.listing.view(self.catalog.products, self.discount_percentage)

    def cart_summary(self):
        return self.cart.summary(self.discount_percentage)
