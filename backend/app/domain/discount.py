"""
Global Discount Domain Model

A single active row in global_discount defines the percentage applied
to every catalog and cart price.

Author: TM3
Date: 2025-10-17
"""
from enum import Enum
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class DiscountConfig(BaseModel):
    """Row of the global_discount table"""
    percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    active: bool = True


class DiscountStatus(str, Enum):
    """Outcome of a discount read"""
    ACTIVE = "active"      # active row found
    MISSING = "missing"    # no active row, equivalent to 0%
    ERROR = "error"        # query/transport failed, degraded to 0%


class DiscountReading(BaseModel):
    percentage: Decimal = Decimal("0")
    status: DiscountStatus
    error: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        return self.status == DiscountStatus.ERROR
