"""
Catalog Feed Connector
Handles all interactions with the external, paginated product feed

The feed is read-only. Each request asks for one 1-based page:

    GET {CATALOG_API_URL}?page=1&page_size=500
    -> {"data": [{...raw product...}], "total_count": 1200}

Raw records are mapped to Product domain models here, at ingestion time.

Author: TM3
Date: 2025-10-04
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Any

import httpx

from app.core.config import settings
from app.core.exceptions import CatalogSourceError
from app.domain.product import AreaProduct, CountProduct, BaseProduct

logger = logging.getLogger(__name__)

# Raw unit_of_measurement values that mean "priced per area"
AREA_UNITS = {"m2", "m²", "mt2", "mts2", "area"}


@dataclass
class CatalogPage:
    """One page of the feed, already mapped to products"""
    page: int
    page_size: int
    products: List[BaseProduct]
    record_count: int
    total_count: int


def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a decimal string from the feed ("1234.50", "1234,50", 1234.5)

    Returns None when the value is missing, non-numeric or not finite.
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None
    if "," in text and "." not in text:
        text = text.replace(",", ".")
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def parse_photo_urls(value: Any) -> tuple:
    """Split the comma-separated urls_foto field, dropping blanks"""
    if not value:
        return ()
    if isinstance(value, (list, tuple)):
        parts = value
    else:
        parts = str(value).split(",")
    return tuple(str(part).strip() for part in parts if part and str(part).strip())


def parse_branch_stock(value: Any) -> Optional[Dict[str, int]]:
    """Map branch -> whole units; unparseable entries are dropped"""
    if not isinstance(value, dict):
        return None
    stock = {}
    for branch, count in value.items():
        number = parse_decimal(count)
        if number is not None:
            stock[str(branch)] = int(number)
    return stock


class CatalogConnector:
    """
    Connector for the external catalog feed

    Handles:
    - Page requests (page number + page size)
    - Raw record -> Product mapping (price parsing, photo list, unit tagging)

    Any failure raises CatalogSourceError; there is no retry here,
    the caller decides what a failed page means.
    """

    def __init__(self, base_url: str = None, api_token: str = None,
                 timeout: float = None, transport: httpx.AsyncBaseTransport = None):
        """
        Initialize catalog connector

        Args:
            base_url: Feed endpoint (defaults to CATALOG_API_URL)
            api_token: Optional bearer token (defaults to CATALOG_API_TOKEN)
            timeout: Per-request timeout in seconds (defaults to CATALOG_REQUEST_TIMEOUT)
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url or settings.CATALOG_API_URL
        self.api_token = api_token if api_token is not None else settings.CATALOG_API_TOKEN
        self.timeout = timeout or settings.CATALOG_REQUEST_TIMEOUT
        self.transport = transport
        self.api_calls = 0

        self.headers = {'Accept': 'application/json'}
        if self.api_token:
            self.headers['Authorization'] = f'Bearer {self.api_token}'

    async def get_products_page(self, page: int, page_size: int) -> CatalogPage:
        """
        Fetch one page of the catalog

        Args:
            page: 1-based page number
            page_size: Records requested per page

        Returns:
            CatalogPage with mapped products and the feed's total count

        Raises:
            CatalogSourceError: on transport errors, timeouts, error status codes
                or a body without the expected fields
        """
        params = {'page': page, 'page_size': page_size}

        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            try:
                response = await client.get(self.base_url, headers=self.headers, params=params)
                self.api_calls += 1
                response.raise_for_status()
                body = response.json()
            except httpx.TimeoutException as e:
                raise CatalogSourceError(f"Timeout fetching catalog page {page}") from e
            except httpx.HTTPStatusError as e:
                raise CatalogSourceError(
                    f"Catalog page {page} failed: {e.response.status_code}"
                ) from e
            except httpx.HTTPError as e:
                raise CatalogSourceError(f"Catalog page {page} request error: {e}") from e
            except ValueError as e:
                raise CatalogSourceError(f"Catalog page {page} returned invalid JSON") from e

        return self._map_page(body, page, page_size)

    def _map_page(self, body: Any, page: int, page_size: int) -> CatalogPage:
        if not isinstance(body, dict):
            raise CatalogSourceError(f"Catalog page {page} has an unexpected body")

        records = body.get('data')
        total = body.get('total_count', body.get('total'))
        if not isinstance(records, list) or total is None:
            raise CatalogSourceError(f"Catalog page {page} is missing data or total_count")

        total_count = parse_decimal(total)
        if total_count is None or total_count < 0:
            raise CatalogSourceError(f"Catalog page {page} has invalid total_count: {total!r}")

        products = []
        for record in records:
            product = map_record_to_product(record)
            if product is not None:
                products.append(product)

        return CatalogPage(
            page=page,
            page_size=page_size,
            products=products,
            record_count=len(records),
            total_count=int(total_count),
        )


def map_record_to_product(record: Any) -> Optional[BaseProduct]:
    """
    Map a raw feed record to a CountProduct or AreaProduct

    Invalid or missing prices become 0. Records without a SKU cannot be
    keyed in the cart and are skipped (None).
    """
    if not isinstance(record, dict):
        logger.warning(f"Skipping non-object catalog record: {record!r}")
        return None

    sku = str(record.get('sku') or '').strip()
    if not sku:
        logger.warning(f"Skipping catalog record without sku: {record.get('name')!r}")
        return None

    price = parse_decimal(record.get('web_list_price'))
    category = record.get('category')
    fields = {
        'sku': sku,
        'name': str(record.get('name') or ''),
        'category': str(category) if category is not None else None,
        'unit_price': price if price is not None and price >= 0 else Decimal("0"),
        'photo_urls': parse_photo_urls(record.get('urls_foto')),
        'branch_stock': parse_branch_stock(record.get('branch_stock')),
    }

    unit = str(record.get('unit_of_measurement') or '').strip().lower()
    if unit in AREA_UNITS:
        coefficient = parse_decimal(record.get('coefficient'))
        if coefficient is not None and coefficient > 0:
            return AreaProduct(coefficient=coefficient, **fields)
        logger.warning(f"Area product {sku} has no valid coefficient "
                       f"({record.get('coefficient')!r}), treating as count product")

    return CountProduct(**fields)
