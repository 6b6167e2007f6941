"""
Repository Layer - Data Access

This layer handles all storage access and returns domain models.
Repositories abstract away SQL and serialization details from business logic.

Author: TM3
Date: 2025-10-17
"""
from app.repositories.discount_repository import DiscountRepository
from app.repositories.cart_repository import CartRepository

__all__ = [
    'DiscountRepository',
    'CartRepository',
]
