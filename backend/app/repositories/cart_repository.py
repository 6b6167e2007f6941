"""
Cart Repository - Durable key-value storage for the cart

The whole cart is stored under one fixed key and rewritten on every
mutation. Backends only move strings; (de)serialization of cart items
lives in CartRepository.

Stored value (version 1):
    {"version": 1, "items": [{"product": {...}, "quantity": "9"}]}

Older values were a bare array of {product, quantity} and are still read.

Author: TM3
Date: 2025-10-17
"""
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from app.core.config import settings
from app.connectors.catalog_connector import map_record_to_product
from app.core.database import get_db_connection_dict_with_retry
from app.domain.cart import CartItem

logger = logging.getLogger(__name__)

CART_SCHEMA_VERSION = 1


class InMemoryCartStorage:
    """Process-local storage, lost on restart"""

    def __init__(self):
        self._values: Dict[str, str] = {}

    def read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def write(self, key: str, value: str) -> None:
        self._values[key] = value


class JsonFileCartStorage:
    """
    One JSON document on disk holding every key

    Writes go to a temporary file that replaces the original, so a crash
    mid-write never leaves a truncated cart behind.
    """

    def __init__(self, path: str = None):
        self.path = Path(path or settings.CART_STORAGE_PATH)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def read(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def write(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except (OSError, ValueError) as e:
            logger.warning(f"Cart storage file {self.path} unreadable, rewriting: {e}")
            data = {}
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False)
        os.replace(tmp_path, self.path)


class PostgresCartStorage:
    """Key-value rows in the cart_storage table"""

    def read(self, key: str) -> Optional[str]:
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                SELECT value
                FROM cart_storage
                WHERE storage_key = %s
            """, (key,))
            row = cursor.fetchone()
            return row['value'] if row else None

        finally:
            cursor.close()
            conn.close()

    def write(self, key: str, value: str) -> None:
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                INSERT INTO cart_storage (storage_key, value, updated_at)
                VALUES (%s, %s, NOW())
                ON CONFLICT (storage_key)
                DO UPDATE SET value = EXCLUDED.value, updated_at = NOW()
            """, (key, value))
            conn.commit()

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()


def _legacy_item(raw) -> dict:
    """Unversioned carts stored the raw feed record as product"""
    if not isinstance(raw, dict):
        raise ValueError(f"Unexpected legacy cart entry: {raw!r}")
    product = map_record_to_product(raw.get('product'))
    if product is None:
        raise ValueError("Legacy cart entry has no usable product")
    return {'product': product, 'quantity': raw.get('quantity')}


def create_cart_storage(backend: str = None):
    """Build the storage backend named by CART_STORAGE_BACKEND"""
    backend = (backend or settings.CART_STORAGE_BACKEND).lower()
    if backend == "file":
        return JsonFileCartStorage()
    if backend == "postgres":
        return PostgresCartStorage()
    if backend == "memory":
        return InMemoryCartStorage()
    raise ValueError(f"Unknown cart storage backend: {backend}")


class CartRepository:
    """
    Serializes the cart under a single storage key

    load() never raises on bad data: anything unreadable is an empty cart.
    """

    def __init__(self, storage=None, key: str = None):
        self.storage = storage if storage is not None else create_cart_storage()
        self.key = key or settings.CART_STORAGE_KEY

    @staticmethod
    def serialize(items: List[CartItem]) -> str:
        return json.dumps({
            'version': CART_SCHEMA_VERSION,
            'items': [item.model_dump(mode='json') for item in items],
        }, ensure_ascii=False)

    @staticmethod
    def deserialize(value: str) -> List[CartItem]:
        """
        Parse a stored cart

        Raises:
            ValueError / ValidationError on malformed data or an unknown version
        """
        if not isinstance(value, (str, bytes, bytearray)):
            raise ValueError(f"Stored cart is not a JSON document: {type(value).__name__}")

        data = json.loads(value)

        if isinstance(data, list):
            raw_items = [_legacy_item(raw) for raw in data]
        elif isinstance(data, dict):
            version = data.get('version')
            if version != CART_SCHEMA_VERSION:
                raise ValueError(f"Unsupported cart schema version: {version!r}")
            raw_items = data.get('items')
            if not isinstance(raw_items, list):
                raise ValueError("Stored cart has no item list")
        else:
            raise ValueError(f"Unexpected stored cart type: {type(data).__name__}")

        items = []
        seen = set()
        for raw in raw_items:
            item = CartItem.model_validate(raw)
            if item.sku in seen:
                raise ValueError(f"Duplicate SKU in stored cart: {item.sku}")
            seen.add(item.sku)
            items.append(item)
        return items

    def load(self) -> List[CartItem]:
        """Read the stored cart, or an empty one when missing or corrupt"""
        try:
            value = self.storage.read(self.key)
        except Exception as e:
            logger.warning(f"Could not read stored cart '{self.key}', starting empty: {e}")
            return []

        if not value:
            return []

        try:
            return self.deserialize(value)
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Stored cart '{self.key}' is corrupt, starting empty: {e}")
            return []

    def save(self, items: List[CartItem]) -> None:
        """Overwrite the stored cart with the full item list"""
        self.storage.write(self.key, self.serialize(items))
