"""
Cart Domain Models

CartItem is what gets persisted; CartLine and CartSummary are the
priced views computed with the current global discount.

Author: TM3
Date: 2025-10-17
"""
from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field, model_validator

from app.domain.product import AreaProduct, Product, exceeds_package_limit, package_context


class CartItem(BaseModel):
    """
    One SKU in the cart

    Count products hold a whole number of units; area products hold a
    whole number of packages (quantity is a multiple of the coefficient).
    """
    product: Product
    quantity: Decimal = Field(..., gt=0)

    @model_validator(mode='after')
    def check_quantity_matches_unit(self) -> 'CartItem':
        if isinstance(self.product, AreaProduct):
            coefficient = self.product.coefficient
            if exceeds_package_limit(self.quantity, coefficient):
                raise ValueError(f"Quantity {self.quantity} of {self.product.sku} is too large")
            try:
                with package_context(self.quantity, coefficient):
                    remainder = self.quantity % coefficient
            except ArithmeticError as e:
                raise ValueError(f"Quantity {self.quantity} of {self.product.sku} is not usable: {e}") from e
            if remainder != 0:
                raise ValueError(
                    f"Quantity {self.quantity} of {self.product.sku} is not a multiple "
                    f"of its package size {coefficient}"
                )
        elif self.quantity != self.quantity.to_integral_value():
            raise ValueError(f"Quantity {self.quantity} of {self.product.sku} is not a whole number")
        return self

    @property
    def sku(self) -> str:
        return self.product.sku


class CartLine(BaseModel):
    """Cart item priced with the active discount"""
    sku: str
    name: str
    unit_of_measurement: str
    quantity: Decimal
    packages: int
    list_price: int
    discounted_price: int
    line_total: int
    photo_url: str

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['quantity'] = float(self.quantity)
        return data


class CartSummary(BaseModel):
    """Cart lines and total (sum of rounded line totals)"""
    lines: List[CartLine]
    discount_percentage: Decimal
    discount_label: str = ""
    total: int = 0

    @property
    def item_count(self) -> int:
        return len(self.lines)

    def to_dict(self) -> dict:
        return {
            'lines': [line.to_dict() for line in self.lines],
            'item_count': self.item_count,
            'discount_percentage': float(self.discount_percentage),
            'discount_label': self.discount_label,
            'total': self.total,
        }
