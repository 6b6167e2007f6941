"""
Shared FastAPI dependencies
"""
from fastapi import Request

from app.services.storefront_service import Storefront


def get_storefront(request: Request) -> Storefront:
    """
    FastAPI dependency returning the session Storefront

    Usage:
        @router.get("/")
        async def read(storefront: Storefront = Depends(get_storefront)):
            ...
    """
    return request.app.state.storefront
