"""Product catalogue tests.

Run with: pytest tests/test_products.py -v
"""

import pytest


def product_body(supplier_uuid: str, **overrides) -> dict:
    body = {
        "supplierUuid": supplier_uuid,
        "category": "Dairy",
        "name": "Llet sencera",
        "description": "Whole milk, 1 l brick",
        "price": 0.95,
        "unit": "l",
        "volume": 1,
    }
    body.update(overrides)
    return body


@pytest.mark.api
@pytest.mark.asyncio
class TestProductEndpoints:
    """/api/products"""

    async def test_create_returns_supplier_details(self, client, seed):
        resp = await client.post("/api/products/create", json=product_body(seed.oils_uuid))

        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["supplierName"] == "Olis del Camp"
        assert data["price"] == 0.95
        assert data["isActive"] is True

    async def test_negative_price_is_400(self, client, seed):
        resp = await client.post(
            "/api/products/create", json=product_body(seed.oils_uuid, price=-1)
        )
        assert resp.status_code == 400
        assert "price" in resp.json()["data"]

    async def test_other_company_supplier_is_404(self, client, other_company):
        resp = await client.post(
            "/api/products/create", json=product_body(other_company.supplier_uuid)
        )
        assert resp.status_code == 404

    async def test_update_moves_product_between_suppliers(self, client, seed):
        body = product_body(seed.bakery_uuid, name="Oli d'oliva", price=13)
        resp = await client.put(f"/api/products/{seed.oil_uuid}", json=body)

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["supplierUuid"] == seed.bakery_uuid
        assert data["price"] == 13.0

    async def test_deactivate_hides_from_listing(self, client, seed):
        resp = await client.patch(f"/api/products/deactivate/{seed.bread_uuid}")
        assert resp.json()["data"]["isActive"] is False

        names = [p["name"] for p in (await client.get("/api/products")).json()["data"]["content"]]
        assert "Pa" not in names

        resp = await client.get("/api/products", params={"isActive": "false"})
        assert [p["name"] for p in resp.json()["data"]["content"]] == ["Pa"]

    async def test_other_company_product_is_404(self, client, other_company):
        resp = await client.get(f"/api/products/{other_company.product_uuid}")
        assert resp.status_code == 404

    async def test_filter_by_price_range(self, client, seed):
        resp = await client.get(
            "/api/products", params={"minPrice": 2, "maxPrice": 20, "sortBy": "price"}
        )
        assert [p["name"] for p in resp.json()["data"]["content"]] == ["OLIVES", "Oli d'oliva"]
