"""
Global Discount API Endpoints

Author: TM3
Date: 2025-10-03
"""
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from app.api.dependencies import get_storefront
from app.core.exceptions import DiscountUpdateError
from app.services.pricing_service import discount_label
from app.services.storefront_service import Storefront

router = APIRouter()


class DiscountUpdate(BaseModel):
    percentage: Decimal = Field(..., ge=0, le=100)


def _discount_response(storefront: Storefront) -> dict:
    reading = storefront.discount.last_reading
    pct = storefront.discount_percentage
    return {
        "status": "success",
        "data": {
            "percentage": float(pct),
            "label": discount_label(pct),
            "source": reading.status.value if reading else None,
        },
    }


@router.get("/")
async def get_discount(storefront: Storefront = Depends(get_storefront)):
    """Current global discount (0 when none is active or it could not be read)"""
    return _discount_response(storefront)


@router.post("/refresh")
async def refresh_discount(storefront: Storefront = Depends(get_storefront)):
    """Re-read the global discount"""
    storefront.refresh_discount()
    return _discount_response(storefront)


@router.put("/")
async def update_discount(body: DiscountUpdate, storefront: Storefront = Depends(get_storefront)):
    """Admin: set the active global discount percentage"""
    try:
        storefront.discount.update_percentage(body.percentage)
    except DiscountUpdateError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _discount_response(storefront)
