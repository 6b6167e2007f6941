"""
Tests for the cart endpoints

Author: TM3
Date: 2025-10-17
"""
from decimal import Decimal

import pytest


@pytest.fixture
def loaded_client(client):
    """Client with the mocked catalog already loaded"""
    assert client.post("/api/v1/catalog/reload").status_code == 200
    return client


class TestCartEndpoints:

    def test_empty_cart(self, client):
        data = client.get("/api/v1/cart/").json()["data"]

        assert data["lines"] == []
        assert data["total"] == 0

    def test_add_and_total(self, loaded_client):
        # Act
        loaded_client.post("/api/v1/cart/items", json={"sku": "SKU-00000"})
        response = loaded_client.post("/api/v1/cart/items", json={"sku": "SKU-00000"})

        # Assert: 1000 with 10% off, two units
        data = response.json()["data"]
        assert data["lines"][0]["quantity"] == 2
        assert data["lines"][0]["discounted_price"] == 900
        assert data["total"] == 1800

    def test_add_unknown_sku_is_404(self, loaded_client):
        response = loaded_client.post("/api/v1/cart/items", json={"sku": "NOPE"})

        assert response.status_code == 404

    def test_set_quantity(self, loaded_client):
        response = loaded_client.put("/api/v1/cart/items/SKU-00001", json={"quantity": 4})

        assert response.json()["data"]["lines"][0]["quantity"] == 4

    def test_invalid_quantity_leaves_cart_unchanged(self, loaded_client):
        loaded_client.put("/api/v1/cart/items/SKU-00001", json={"quantity": 4})

        response = loaded_client.put("/api/v1/cart/items/SKU-00001", json={"quantity": "abc"})

        assert response.status_code == 200
        assert response.json()["data"]["lines"][0]["quantity"] == 4

    def test_adjust_to_zero_removes(self, loaded_client):
        loaded_client.post("/api/v1/cart/items", json={"sku": "SKU-00000"})

        data = loaded_client.patch("/api/v1/cart/items/SKU-00000", json={"delta": -1}).json()["data"]

        assert data["lines"] == []

    def test_adjust_sku_not_in_cart_is_404(self, loaded_client):
        response = loaded_client.patch("/api/v1/cart/items/SKU-00000", json={"delta": 1})

        assert response.status_code == 404

    def test_delete_is_idempotent(self, loaded_client):
        loaded_client.post("/api/v1/cart/items", json={"sku": "SKU-00000"})

        first = loaded_client.delete("/api/v1/cart/items/SKU-00000")
        second = loaded_client.delete("/api/v1/cart/items/SKU-00000")

        assert first.status_code == second.status_code == 200
        assert second.json()["data"]["lines"] == []

    def test_area_product_flow(self, client, storefront, area_product):
        """Area products cannot be added by unit; set_quantity rounds to packages"""
        storefront.catalog.products = [area_product]

        add = client.post("/api/v1/cart/items", json={"sku": area_product.sku})
        put = client.put(f"/api/v1/cart/items/{area_product.sku}", json={"quantity": "7"})

        assert add.status_code == 400
        line = put.json()["data"]["lines"][0]
        assert line["quantity"] == 9
        assert line["packages"] == 3
        assert storefront.cart.get(area_product.sku).quantity == Decimal("9")

    def test_cart_survives_catalog_failure(self, loaded_client, storefront, feed_transport):
        """Cart lines keep their own product copy"""
        loaded_client.post("/api/v1/cart/items", json={"sku": "SKU-00000"})
        failing, _ = feed_transport(total=3, fail_on_page=1)
        storefront.catalog.connector.transport = failing
        loaded_client.post("/api/v1/catalog/reload")

        response = loaded_client.patch("/api/v1/cart/items/SKU-00000", json={"delta": 1})

        assert response.json()["data"]["lines"][0]["quantity"] == 2

    def test_huge_area_is_a_noop(self, client, storefront, area_product):
        storefront.catalog.products = [area_product]
        client.put(f"/api/v1/cart/items/{area_product.sku}", json={"quantity": "7"})

        response = client.put(f"/api/v1/cart/items/{area_product.sku}", json={"quantity": "1e30"})

        assert response.status_code == 200
        assert response.json()["data"]["lines"][0]["quantity"] == 9
