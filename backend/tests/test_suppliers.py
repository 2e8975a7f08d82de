"""Supplier management tests.

Run with: pytest tests/test_suppliers.py -v
"""

import pytest

from abasta.middleware.exceptions import PermissionDeniedError, ResourceNotFoundError
from abasta.services import suppliers as supplier_service
from abasta.services.suppliers import exists_by_company_uuid_and_name_ignore_case
from abasta.utils.pagination import PageRequest

NEW_SUPPLIER = {
    "name": "Verdures Pla",
    "contactName": "Núria Pla",
    "email": "comandes@verdurespla.cat",
    "phone": "972111222",
    "address": "Mercabarna, Barcelona",
    "notes": "Delivers Mon/Thu",
}


@pytest.mark.unit
@pytest.mark.asyncio
class TestNameUniqueness:
    """exists_by_company_uuid_and_name_ignore_case()"""

    async def test_matches_ignoring_case_and_padding(self, db_session, seed):
        assert await exists_by_company_uuid_and_name_ignore_case(
            db_session, seed.company_uuid, "  OLIS DEL CAMP "
        )

    async def test_scoped_to_company(self, db_session, seed):
        assert not await exists_by_company_uuid_and_name_ignore_case(
            db_session, "another-company", "Olis del Camp"
        )

    async def test_excluding_self(self, db_session, seed):
        assert not await exists_by_company_uuid_and_name_ignore_case(
            db_session, seed.company_uuid, "olis del camp", exclude_uuid=seed.oils_uuid
        )

    async def test_inactive_suppliers_still_count(self, db_session, seed):
        seed.bakery.is_active = False
        await db_session.flush()
        assert await exists_by_company_uuid_and_name_ignore_case(
            db_session, seed.company_uuid, "forn sant pau"
        )


@pytest.mark.api
@pytest.mark.asyncio
class TestSupplierEndpoints:
    """POST/GET/PUT/PATCH /api/suppliers"""

    async def test_create_and_read_back(self, client, seed):
        resp = await client.post("/api/suppliers", json=NEW_SUPPLIER)
        assert resp.status_code == 201
        created = resp.json()["data"]
        assert created["companyUuid"] == seed.company_uuid
        assert created["isActive"] is True

        resp = await client.get(f"/api/suppliers/{created['uuid']}")
        data = resp.json()["data"]
        assert data["contactName"] == "Núria Pla"
        assert data["notes"] == "Delivers Mon/Thu"

    async def test_duplicate_name_is_409(self, client, seed):
        resp = await client.post("/api/suppliers", json={**NEW_SUPPLIER, "name": "olis DEL camp"})
        assert resp.status_code == 409

    async def test_same_name_in_another_company_is_fine(self, client, seed, other_company):
        # other_company already has an "Olis del Camp"
        resp = await client.post("/api/suppliers", json={**NEW_SUPPLIER, "name": "Verdures"})
        assert resp.status_code == 201

    async def test_update_keeps_own_name(self, client, seed):
        body = {**NEW_SUPPLIER, "name": "Olis del Camp", "phone": "977999999"}
        resp = await client.put(f"/api/suppliers/{seed.oils_uuid}", json=body)

        assert resp.status_code == 200
        assert resp.json()["data"]["phone"] == "977999999"

    async def test_rename_onto_sibling_is_409(self, client, seed):
        body = {**NEW_SUPPLIER, "name": "Forn Sant Pau"}
        resp = await client.put(f"/api/suppliers/{seed.oils_uuid}", json=body)
        assert resp.status_code == 409

    async def test_invalid_email_is_400(self, client, seed):
        resp = await client.post("/api/suppliers", json={**NEW_SUPPLIER, "email": "nope"})
        assert resp.status_code == 400
        assert "email" in resp.json()["data"]

    async def test_toggle_status_hides_from_default_filter(self, client, seed):
        resp = await client.patch(
            f"/api/suppliers/{seed.bakery_uuid}/status", params={"isActive": "false"}
        )
        assert resp.json()["data"]["isActive"] is False

        names = [s["name"] for s in (await client.get("/api/suppliers/filter")).json()["data"]["content"]]
        assert names == ["Olis del Camp"]

        resp = await client.get("/api/suppliers/filter", params={"isActive": "false"})
        assert [s["name"] for s in resp.json()["data"]["content"]] == ["Forn Sant Pau"]

    async def test_list_by_own_company(self, client, seed):
        resp = await client.get(f"/api/suppliers/company/{seed.company_uuid}")
        data = resp.json()["data"]
        assert data["pageable"]["totalElements"] == 2
        assert [s["name"] for s in data["content"]] == ["Forn Sant Pau", "Olis del Camp"]

    async def test_list_by_other_company_is_403(self, client, other_company):
        resp = await client.get(f"/api/suppliers/company/{other_company.company_uuid}")
        assert resp.status_code == 403

    async def test_other_company_supplier_is_404(self, client, other_company):
        resp = await client.get(f"/api/suppliers/{other_company.supplier_uuid}")
        assert resp.status_code == 404


@pytest.mark.unit
@pytest.mark.asyncio
class TestSupplierService:
    async def test_list_by_company_denies_other_company(self, db_session, seed, other_company):
        with pytest.raises(PermissionDeniedError):
            await supplier_service.list_suppliers_by_company(
                db_session, seed.admin_email, other_company.company_uuid, PageRequest()
            )

    async def test_toggle_unknown_supplier(self, db_session, seed):
        with pytest.raises(ResourceNotFoundError):
            await supplier_service.toggle_supplier_status(
                db_session, seed.admin_email, "missing", False
            )
