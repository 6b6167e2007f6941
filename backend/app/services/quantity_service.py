"""
Quantity Service - Package quantization for area-priced products

A requested area is turned into whole packages of `coefficient` area each:

    packages = floor(area / coefficient) + 1
    quantity = packages * coefficient

An exact multiple still gets one extra package (area=6, coefficient=3 -> 9).
All steps run in a Decimal context wide enough to stay exact; requests
beyond MAX_PACKAGES packages are rejected as invalid input.

Author: TM3
Date: 2025-10-03
"""
import logging
from decimal import Decimal, InvalidOperation, localcontext
from typing import Optional

from app.domain.product import MAX_PACKAGES, exceeds_package_limit, package_context

logger = logging.getLogger(__name__)


def to_positive_decimal(value) -> Optional[Decimal]:
    """
    Parse user input into a finite, strictly positive Decimal

    Returns None for anything else (NaN, infinities, zero, negatives,
    booleans, non-numeric strings).
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite() or number <= 0:
        return None
    return number


def package_count(area, coefficient) -> Optional[int]:
    """Number of packages allocated for a requested area, or None on invalid input"""
    area = to_positive_decimal(area)
    coefficient = to_positive_decimal(coefficient)
    if area is None or coefficient is None:
        return None
    if exceeds_package_limit(area, coefficient):
        logger.debug(f"Area {area} is too large for packages of {coefficient}")
        return None

    with package_context(area, coefficient):
        packages = int(area // coefficient) + 1

    if packages > MAX_PACKAGES:
        logger.debug(f"Area {area} needs {packages} packages, above {MAX_PACKAGES}")
        return None
    return packages


def quantity_for_packages(packages: int, coefficient: Decimal) -> Decimal:
    """Exact packages * coefficient"""
    with localcontext() as context:
        context.prec = max(context.prec, len(str(packages)) + len(coefficient.as_tuple().digits))
        return Decimal(packages) * coefficient


def normalize_area_quantity(area, coefficient) -> Optional[Decimal]:
    """
    Convert a requested area into the package-quantized cart quantity

    Args:
        area: Requested area (user input, any numeric-looking value)
        coefficient: Area covered by one package, must be > 0

    Returns:
        packages * coefficient, always a positive multiple of coefficient
        and >= area; None when the input is invalid (caller leaves the cart as is)

    Examples:
        normalize_area_quantity(7, 3) -> Decimal('9')
        normalize_area_quantity(6, 3) -> Decimal('9')
    """
    packages = package_count(area, coefficient)
    if packages is None:
        logger.debug(f"Rejected area quantity: area={area!r}, coefficient={coefficient!r}")
        return None
    return quantity_for_packages(packages, to_positive_decimal(coefficient))


def packages_in_quantity(quantity: Decimal, coefficient: Decimal) -> int:
    """Whole packages contained in an already-normalized quantity"""
    with package_context(quantity, coefficient):
        return int(quantity // coefficient)
