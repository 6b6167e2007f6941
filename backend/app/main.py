"""
Obra Catalog - Backend API
Catálogo sincronizado, descuento global y carrito por SKU
"""
import asyncio
import logging
import os
from contextlib import asynccontextmanager, suppress
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)

from app.core.config import settings
from app.api import catalog, cart, discount
from app.api.dependencies import get_storefront
from app.services.storefront_service import Storefront

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", settings.LOG_LEVEL),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the session: discount + stored cart now, catalog in the background"""
    storefront = Storefront()
    storefront.start()
    app.state.storefront = storefront

    initial_load = asyncio.create_task(storefront.reload_catalog())
    try:
        yield
    finally:
        if not initial_load.done():
            initial_load.cancel()
        with suppress(asyncio.CancelledError):
            await initial_load


# Crear aplicación FastAPI
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(catalog.router, prefix="/api/v1/catalog", tags=["Catalog"])
app.include_router(cart.router, prefix="/api/v1/cart", tags=["Cart"])
app.include_router(discount.router, prefix="/api/v1/discount", tags=["Discount"])


@app.get("/")
async def root():
    """Endpoint raíz - Verificación de estado de la API"""
    return {
        "message": "Obra Catalog API",
        "status": "online",
        "version": settings.API_VERSION,
    }


@app.get("/health")
async def health(storefront: Storefront = Depends(get_storefront)):
    """Health check: catalog availability and discount source"""
    catalog_status = storefront.catalog.status()
    reading = storefront.discount.last_reading

    status = "healthy"
    if catalog_status['error'] or (reading and reading.is_degraded):
        status = "degraded"

    return {
        "status": status,
        "service": "obra-catalog-api",
        "version": settings.API_VERSION,
        "catalog": catalog_status,
        "discount": {
            "percentage": float(storefront.discount_percentage),
            "source": reading.status.value if reading else None,
            "error": reading.error if reading else None,
        },
        "cart_items": len(storefront.cart),
    }
