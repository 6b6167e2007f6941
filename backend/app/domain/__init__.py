"""
Domain Layer - Business Entities

This layer contains Pydantic models representing business entities.
These models enforce type safety and validation across the application.

Author: TM3
Date: 2025-10-17
"""
from app.domain.product import Product, CountProduct, AreaProduct, product_adapter
from app.domain.discount import DiscountConfig, DiscountReading, DiscountStatus
from app.domain.cart import CartItem, CartLine, CartSummary

__all__ = [
    'Product', 'CountProduct', 'AreaProduct', 'product_adapter',
    'DiscountConfig', 'DiscountReading', 'DiscountStatus',
    'CartItem', 'CartLine', 'CartSummary',
]
