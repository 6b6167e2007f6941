"""
Catalog API Endpoints
Listing of the externally synced catalog with discounted prices

Author: TM3
Date: 2025-10-03
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from app.api.dependencies import get_storefront
from app.services.catalog_service import CatalogLoadStatus
from app.services.storefront_service import Storefront

router = APIRouter()


@router.get("/")
async def get_catalog(
    search: Optional[str] = Query(None, description="Search by name or SKU"),
    page: Optional[int] = Query(None, ge=1, description="Page number (clamped to the last page)"),
    storefront: Storefront = Depends(get_storefront),
):
    """
    Get one page of the catalog

    Filter and page are remembered between calls; the page is clamped
    whenever the filtered result shrinks.
    """
    if storefront.catalog.error:
        raise HTTPException(status_code=503, detail=storefront.catalog.error)

    listing = storefront.listing_page(query=search, page=page)

    return {
        "status": "success",
        "loading": storefront.catalog.loading,
        **listing.to_dict(),
    }


@router.get("/status")
async def get_catalog_status(storefront: Storefront = Depends(get_storefront)):
    """Loading flag, progress (0-100), error and product count of the catalog"""
    return {
        "status": "success",
        "data": storefront.catalog.status(),
    }


@router.post("/reload")
async def reload_catalog(storefront: Storefront = Depends(get_storefront)):
    """
    Fetch the whole catalog again from the external feed

    Any page failure makes the entire catalog unavailable (503).
    """
    result = await storefront.reload_catalog()

    if result.status == CatalogLoadStatus.FAILED:
        raise HTTPException(status_code=503, detail=result.error)

    return {
        "status": result.status.value,
        "generation": result.generation,
        "count": len(result.products),
        "pages_fetched": result.pages_fetched,
        "progress": result.progress_history[-1] if result.progress_history else 0,
        "duration_seconds": round(result.duration_seconds, 3),
    }


@router.post("/sort/toggle")
async def toggle_price_sort(storefront: Storefront = Depends(get_storefront)):
    """Cycle the price sort: none -> asc -> desc -> none"""
    direction = storefront.listing.toggle_sort()
    return {
        "status": "success",
        "sort": direction.value,
    }
