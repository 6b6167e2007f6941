"""
Tests for the catalog endpoints

Author: TM3
Date: 2025-10-17
"""


class TestCatalogEndpoints:

    def test_reload_then_list(self, client):
        """Reload fetches all pages; listing shows discounted prices"""
        # Act
        reload = client.post("/api/v1/catalog/reload")
        listing = client.get("/api/v1/catalog/")

        # Assert
        assert reload.status_code == 200
        assert reload.json()["count"] == 3
        assert reload.json()["pages_fetched"] == 2
        assert reload.json()["progress"] == 100

        body = listing.json()
        assert body["total_count"] == 3
        assert body["total_pages"] == 2
        assert body["discount_label"] == "10% OFF"
        assert [p["discounted_price"] for p in body["data"]] == [900, 901]

    def test_search_and_page_clamp(self, client):
        client.post("/api/v1/catalog/reload")
        client.get("/api/v1/catalog/", params={"page": 2})

        body = client.get("/api/v1/catalog/", params={"search": "sku-00001"}).json()

        assert body["page"] == 1
        assert [p["sku"] for p in body["data"]] == ["SKU-00001"]

    def test_sort_toggle_cycles(self, client):
        directions = [client.post("/api/v1/catalog/sort/toggle").json()["sort"] for _ in range(3)]

        assert directions == ["asc", "desc", "none"]

    def test_sorted_descending(self, client):
        client.post("/api/v1/catalog/reload")
        client.post("/api/v1/catalog/sort/toggle")
        client.post("/api/v1/catalog/sort/toggle")

        body = client.get("/api/v1/catalog/").json()

        assert [p["sku"] for p in body["data"]] == ["SKU-00002", "SKU-00001"]

    def test_status_before_load(self, client):
        data = client.get("/api/v1/catalog/status").json()["data"]

        assert data["count"] == 0
        assert data["loading"] is False
        assert data["error"] is None

    def test_failed_reload_is_503(self, client, storefront, feed_transport):
        failing, _ = feed_transport(total=3, fail_on_page=2)
        storefront.catalog.connector.transport = failing

        response = client.post("/api/v1/catalog/reload")

        assert response.status_code == 503
        assert client.get("/api/v1/catalog/").status_code == 503
        assert client.get("/api/v1/catalog/status").json()["data"]["count"] == 0

    def test_health_reports_degraded_catalog(self, client, storefront, feed_transport):
        failing, _ = feed_transport(total=3, fail_on_page=1)
        storefront.catalog.connector.transport = failing
        client.post("/api/v1/catalog/reload")

        body = client.get("/health").json()

        assert body["status"] == "degraded"
        assert body["discount"]["percentage"] == 10
