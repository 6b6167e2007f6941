"""
Cart Service - SKU-keyed cart with durable persistence

Every effective mutation rewrites the whole stored cart before the
in-memory state changes, so memory and storage never disagree after a
failed write. Operations that change nothing do not write.

Quantities:
- Count products: whole units
- Area products: requested area is quantized into packages
  (see quantity_service.normalize_area_quantity)

Author: TM3
Date: 2025-11-18
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from app.core.exceptions import InvalidCartOperation
from app.domain.cart import CartItem, CartLine, CartSummary
from app.domain.product import MAX_PACKAGES, AreaProduct, BaseProduct
from app.repositories.cart_repository import CartRepository
from app.services import pricing_service
from app.services.quantity_service import (
    normalize_area_quantity,
    packages_in_quantity,
    quantity_for_packages,
)

logger = logging.getLogger(__name__)


class CartStore:
    """
    In-memory cart backed by a CartRepository

    There is no cross-process coordination: two writers sharing the same
    storage key overwrite each other (last writer wins).
    """

    def __init__(self, repository: CartRepository = None):
        self.repository = repository or CartRepository()
        self._items: Dict[str, CartItem] = {}

    def load(self) -> int:
        """
        Replace the in-memory cart with the stored one

        Returns:
            Number of items loaded (0 for a missing or corrupt cart)
        """
        self._items = {item.sku: item for item in self.repository.load()}
        logger.info(f"Cart loaded with {len(self._items)} items")
        return len(self._items)

    def items(self) -> List[CartItem]:
        return list(self._items.values())

    def get(self, sku: str) -> Optional[CartItem]:
        return self._items.get(sku)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, sku: str) -> bool:
        return sku in self._items

    def _commit(self, items: Dict[str, CartItem]) -> None:
        self.repository.save(list(items.values()))
        self._items = items

    def _put(self, product: BaseProduct, quantity: Decimal) -> CartItem:
        item = CartItem(product=product, quantity=quantity)
        items = dict(self._items)
        items[product.sku] = item
        self._commit(items)
        return item

    def _drop(self, sku: str) -> None:
        items = dict(self._items)
        del items[sku]
        self._commit(items)

    # ==================== MUTATIONS ====================

    def add_one(self, product: BaseProduct) -> CartItem:
        """
        Add one unit of a count product

        Raises:
            InvalidCartOperation: for area products (use set_quantity)
        """
        if isinstance(product, AreaProduct):
            raise InvalidCartOperation(
                f"{product.sku} is sold by area; set a quantity instead of adding units"
            )

        existing = self._items.get(product.sku)
        if existing is not None and isinstance(existing.product, AreaProduct):
            # Catalog now sells this SKU by the unit; its package quantity no longer applies
            logger.info(f"{product.sku} changed from area to count, restarting its quantity")
            existing = None

        quantity = existing.quantity + 1 if existing else Decimal("1")
        if quantity > MAX_PACKAGES:
            return existing
        return self._put(product, quantity)

    def set_quantity(self, product: BaseProduct, quantity) -> Optional[CartItem]:
        """
        Overwrite (or insert) the quantity for a product

        Args:
            product: Product being set
            quantity: Requested area for area products, units for count products

        Returns:
            The stored item, or None when the entry is absent afterwards.
            Invalid input leaves the cart unchanged.
        """
        if isinstance(product, AreaProduct):
            normalized = normalize_area_quantity(quantity, product.coefficient)
            if normalized is None:
                return self._items.get(product.sku)
            return self._put(product, normalized)

        units = _parse_units(quantity)
        if units is None or units > MAX_PACKAGES:
            return self._items.get(product.sku)
        if units <= 0:
            self.remove(product.sku)
            return None
        return self._put(product, units)

    def adjust_quantity(self, sku: str, delta) -> Optional[CartItem]:
        """
        Increment/decrement an entry by a whole number

        Count items move by `delta` units, area items by `delta` packages.
        Reaching zero or below removes the entry. Unknown SKUs and
        non-integer deltas are ignored.
        """
        existing = self._items.get(sku)
        if existing is None:
            return None

        steps = _parse_units(delta)
        if steps is None or steps == 0:
            return existing

        product = existing.product
        if isinstance(product, AreaProduct):
            count = packages_in_quantity(existing.quantity, product.coefficient) + steps
        else:
            count = existing.quantity + steps

        if count <= 0:
            self._drop(sku)
            return None
        if count > MAX_PACKAGES:
            return existing

        if isinstance(product, AreaProduct):
            return self._put(product, quantity_for_packages(int(count), product.coefficient))
        return self._put(product, count)

    def remove(self, sku: str) -> bool:
        """
        Remove an entry (idempotent)

        Returns:
            True if something was removed
        """
        if sku not in self._items:
            return False
        self._drop(sku)
        return True

    # ==================== PRICED VIEW ====================

    def summary(self, discount_percentage) -> CartSummary:
        """
        Price every line with the given discount

        Line totals are rounded per line and summed (round-then-sum).
        """
        lines = []
        for item in self._items.values():
            product = item.product
            if isinstance(product, AreaProduct):
                packages = packages_in_quantity(item.quantity, product.coefficient)
            else:
                packages = int(item.quantity)

            lines.append(CartLine(
                sku=product.sku,
                name=product.name,
                unit_of_measurement=product.unit_of_measurement,
                quantity=item.quantity,
                packages=packages,
                list_price=pricing_service.list_price(product.unit_price),
                discounted_price=pricing_service.discounted_price(product.unit_price, discount_percentage),
                line_total=pricing_service.line_total(product.unit_price, item.quantity, discount_percentage),
                photo_url=product.primary_photo_url,
            ))

        return CartSummary(
            lines=lines,
            discount_percentage=pricing_service.clamp_percentage(discount_percentage),
            discount_label=pricing_service.discount_label(discount_percentage),
            total=pricing_service.cart_total(line.line_total for line in lines),
        )


def _parse_units(value) -> Optional[Decimal]:
    """Whole number (positive, zero or negative) or None"""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite() or number != number.to_integral_value():
        return None
    return number.to_integral_value()
