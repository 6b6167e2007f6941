"""
Cart API Endpoints
SKU-keyed cart, priced with the current global discount

Author: TM3
Date: 2025-10-03
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Union

from app.api.dependencies import get_storefront
from app.core.exceptions import InvalidCartOperation
from app.services.storefront_service import Storefront

router = APIRouter()


# Request models
class CartItemAdd(BaseModel):
    sku: str


class CartQuantityUpdate(BaseModel):
    # Area for area products, units for count products
    quantity: Union[float, str]


class CartQuantityAdjust(BaseModel):
    delta: int


def _cart_response(storefront: Storefront) -> dict:
    return {
        "status": "success",
        "data": storefront.cart_summary().to_dict(),
    }


@router.get("/")
async def get_cart(storefront: Storefront = Depends(get_storefront)):
    """Cart lines with list/discounted prices and the total"""
    return _cart_response(storefront)


@router.post("/items")
async def add_cart_item(body: CartItemAdd, storefront: Storefront = Depends(get_storefront)):
    """Add one unit of a count product"""
    product = storefront.find_product(body.sku)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product not found: {body.sku}")

    try:
        storefront.cart.add_one(product)
    except InvalidCartOperation as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _cart_response(storefront)


@router.put("/items/{sku}")
async def set_cart_item_quantity(sku: str, body: CartQuantityUpdate,
                                 storefront: Storefront = Depends(get_storefront)):
    """
    Set the quantity of a product

    Area products: the requested area is rounded up to whole packages.
    Invalid quantities leave the cart unchanged.
    """
    product = storefront.find_product(sku)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product not found: {sku}")

    storefront.cart.set_quantity(product, body.quantity)
    return _cart_response(storefront)


@router.patch("/items/{sku}")
async def adjust_cart_item_quantity(sku: str, body: CartQuantityAdjust,
                                    storefront: Storefront = Depends(get_storefront)):
    """Increment/decrement by units (or packages); reaching zero removes the item"""
    if sku not in storefront.cart:
        raise HTTPException(status_code=404, detail=f"SKU not in cart: {sku}")

    storefront.cart.adjust_quantity(sku, body.delta)
    return _cart_response(storefront)


@router.delete("/items/{sku}")
async def remove_cart_item(sku: str, storefront: Storefront = Depends(get_storefront)):
    """Remove a SKU from the cart (no error if it is not there)"""
    storefront.cart.remove(sku)
    return _cart_response(storefront)
