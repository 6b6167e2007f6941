"""
Configuración centralizada de la aplicación
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Configuración de la aplicación"""

    # API Settings
    API_TITLE: str = "Obra Catalog API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Catálogo, precios con descuento global y carrito por SKU"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database (global_discount + cart_storage tables)
    DATABASE_URL: str = ""
    DATABASE_CONNECT_TIMEOUT: int = 10
    DATABASE_STATEMENT_TIMEOUT_MS: int = 5000

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000,http://localhost:5173"

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    # External catalog feed
    CATALOG_API_URL: str = "http://localhost:9000/api/products"
    CATALOG_API_TOKEN: str = ""
    CATALOG_PAGE_SIZE: int = 500
    CATALOG_REQUEST_TIMEOUT: float = 30.0

    # Listing
    LISTING_PAGE_SIZE: int = 50

    # Cart persistence: file | postgres | memory
    CART_STORAGE_BACKEND: str = "file"
    CART_STORAGE_PATH: str = ".cart_storage.json"
    CART_STORAGE_KEY: str = "cart"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
