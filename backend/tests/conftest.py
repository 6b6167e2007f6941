"""
Pytest fixtures and configuration for Obra Catalog Backend tests

This file provides shared fixtures that can be used across all test modules.

Author: TM3
Date: 2025-10-17
"""
import json
from decimal import Decimal
from unittest.mock import MagicMock

import httpx
import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient

from app.connectors.catalog_connector import CatalogConnector
from app.domain.discount import DiscountConfig
from app.domain.product import AreaProduct, CountProduct
from app.main import app
from app.repositories.cart_repository import CartRepository, InMemoryCartStorage
from app.repositories.discount_repository import DiscountRepository
from app.services.cart_service import CartStore
from app.services.catalog_service import CatalogFetcher
from app.services.discount_service import DiscountProvider
from app.services.listing_service import ListingController
from app.services.storefront_service import Storefront

# Load environment variables for tests
load_dotenv()


@pytest.fixture
def anyio_backend():
    # asyncio only, no trio needed
    return "asyncio"


@pytest.fixture
def sample_feed_record():
    """
    Provides a raw count product record as sent by the catalog feed
    """
    return {
        "sku": "CEM-0001",
        "name": "Cemento Portland 50kg",
        "category": "CEMENTOS",
        "urls_foto": "https://cdn.example.com/cem1.jpg, https://cdn.example.com/cem2.jpg",
        "web_list_price": "12500.50",
        "unit_of_measurement": "UN",
        "branch_stock": {"Centro": "12", "Norte": 3},
    }


@pytest.fixture
def sample_area_record():
    """
    Provides a raw area-priced record (m2, boxes of 2.5 m2)
    """
    return {
        "sku": "CER-4545",
        "name": "Cerámica Piso Gris 45x45",
        "category": "PISOS",
        "urls_foto": "",
        "web_list_price": "8990",
        "unit_of_measurement": "M2",
        "coefficient": "2.5",
    }


@pytest.fixture
def count_product():
    return CountProduct(sku="CEM-0001", name="Cemento Portland 50kg", unit_price=Decimal("12500"))


@pytest.fixture
def area_product():
    return AreaProduct(sku="CER-4545", name="Cerámica Piso Gris 45x45",
                       unit_price=Decimal("8990"), coefficient=Decimal("3"))


@pytest.fixture
def cart_storage():
    return InMemoryCartStorage()


@pytest.fixture
def cart_repository(cart_storage):
    return CartRepository(storage=cart_storage, key="cart")


@pytest.fixture
def feed_transport():
    """
    Builds an httpx.MockTransport serving `total` generated records

    Returns (transport, requests) where requests collects every request sent.
    """
    def _build(total: int, fail_on_page: int = None, price_for=None):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            page = int(request.url.params["page"])
            page_size = int(request.url.params["page_size"])

            if fail_on_page is not None and page == fail_on_page:
                return httpx.Response(500, text="internal error")

            start = (page - 1) * page_size
            end = min(start + page_size, total)
            data = [
                {
                    "sku": f"SKU-{i:05d}",
                    "name": f"Producto {i}",
                    "web_list_price": str(price_for(i) if price_for else 1000 + i),
                    "unit_of_measurement": "UN",
                }
                for i in range(start, end)
            ]
            return httpx.Response(200, content=json.dumps({"data": data, "total_count": total}))

        return httpx.MockTransport(handler), requests

    return _build


@pytest.fixture
def discount_repository():
    """Mocked global_discount table with a 10% active row"""
    repository = MagicMock(spec=DiscountRepository)
    repository.find_active.return_value = DiscountConfig(percentage=Decimal("10"))
    repository.update_active_percentage.return_value = 1
    return repository


@pytest.fixture
def storefront(feed_transport, discount_repository, cart_repository):
    """
    Storefront wired to a mocked feed (3 products), mocked discount
    table and in-memory cart storage
    """
    transport, _ = feed_transport(total=3)
    connector = CatalogConnector(base_url="http://feed.test/products", api_token="", transport=transport)
    front = Storefront(
        catalog=CatalogFetcher(connector=connector, page_size=2),
        discount=DiscountProvider(repository=discount_repository),
        cart=CartStore(repository=cart_repository),
        listing=ListingController(page_size=2),
    )
    front.start()
    return front


@pytest.fixture
def client(storefront):
    """TestClient without lifespan; the storefront is injected directly"""
    app.state.storefront = storefront
    return TestClient(app)
