"""Dynamic filter builder and paginated listing tests.

Run with: pytest tests/test_filters.py -v
"""

from decimal import Decimal

import pytest
from sqlalchemy import select

from abasta.middleware.exceptions import BadRequestError
from abasta.models import OrderStatus, Product, Supplier
from abasta.services.filters import (
    PRODUCT_SORTABLE,
    ProductFilters,
    SupplierFilters,
    parse_order_status,
    product_predicates,
    supplier_predicates,
)
from abasta.utils.pagination import PageRequest, paginate


async def product_names(db, filters: ProductFilters) -> list[str]:
    result = await db.execute(
        select(Product.name).where(*product_predicates(filters)).order_by(Product.name)
    )
    return list(result.scalars().all())


# ── Predicates ───────────────────────────────────────────────

@pytest.mark.unit
@pytest.mark.asyncio
class TestProductPredicates:
    """product_predicates() against the seeded catalogue"""

    async def test_search_text_is_case_insensitive_substring(self, db_session, seed):
        names = await product_names(
            db_session, ProductFilters(company_id=seed.company_id, search_text="oli")
        )
        assert names == ["OLIVES", "Oli d'oliva"]

    async def test_blank_text_is_ignored(self, db_session, seed):
        names = await product_names(
            db_session, ProductFilters(company_id=seed.company_id, name="   ")
        )
        assert len(names) == 3

    async def test_inactive_hidden_unless_requested(self, db_session, seed):
        seed.bread.is_active = False
        await db_session.flush()

        active = await product_names(db_session, ProductFilters(company_id=seed.company_id))
        inactive = await product_names(
            db_session, ProductFilters(company_id=seed.company_id, is_active=False)
        )
        assert "Pa" not in active
        assert inactive == ["Pa"]

    async def test_price_range_is_inclusive(self, db_session, seed):
        names = await product_names(
            db_session,
            ProductFilters(
                company_id=seed.company_id,
                min_price=Decimal("1.20"),
                max_price=Decimal("3.99"),
            ),
        )
        assert names == ["OLIVES", "Pa"]

    async def test_unit_matches_exactly_ignoring_case(self, db_session, seed):
        names = await product_names(
            db_session, ProductFilters(company_id=seed.company_id, unit="KG")
        )
        assert names == ["OLIVES"]

    async def test_like_wildcards_are_literal(self, db_session, seed):
        names = await product_names(
            db_session, ProductFilters(company_id=seed.company_id, name="%")
        )
        assert names == []

    async def test_company_scope_excludes_other_tenants(self, db_session, seed, other_company):
        names = await product_names(db_session, ProductFilters(company_id=seed.company_id))
        assert names.count("Oli d'oliva") == 1


@pytest.mark.unit
@pytest.mark.asyncio
class TestSupplierPredicates:
    """supplier_predicates()"""

    async def test_search_spans_contact_fields(self, db_session, seed):
        result = await db_session.execute(
            select(Supplier.name).where(
                *supplier_predicates(
                    SupplierFilters(company_id=seed.company_id, search_text="laia")
                )
            )
        )
        assert result.scalars().all() == ["Forn Sant Pau"]


@pytest.mark.unit
class TestOrderStatusParsing:
    def test_case_insensitive(self):
        assert parse_order_status("sent") == OrderStatus.SENT

    def test_blank_means_no_filter(self):
        assert parse_order_status("  ") is None
        assert parse_order_status(None) is None

    def test_unknown_status_rejected(self):
        with pytest.raises(BadRequestError, match="Invalid order status"):
            parse_order_status("SHIPPED")


# ── Pagination ───────────────────────────────────────────────

@pytest.mark.unit
@pytest.mark.asyncio
class TestPagination:
    async def test_page_slice_and_totals(self, db_session, seed):
        page = await paginate(
            db_session,
            Product,
            product_predicates(ProductFilters(company_id=seed.company_id)),
            PageRequest(page=1, size=2, sort_by="price", sort_dir="desc"),
            PRODUCT_SORTABLE,
        )
        assert page.total_elements == 3
        assert page.total_pages == 2
        assert [p.name for p in page.items] == ["Pa"]
        assert page.sort == "price,desc"

    async def test_camel_case_sort_field_accepted(self, db_session, seed):
        page = await paginate(
            db_session, Product, [], PageRequest(sort_by="createdAt"), PRODUCT_SORTABLE
        )
        assert page.total_elements == 3

    async def test_unknown_sort_field_rejected(self, db_session, seed):
        with pytest.raises(BadRequestError, match="Cannot sort by"):
            await paginate(
                db_session, Product, [], PageRequest(sort_by="password"), PRODUCT_SORTABLE
            )

    @pytest.mark.parametrize("kwargs", [{"page": -1}, {"size": 0}, {"size": 101}, {"sort_dir": "up"}])
    async def test_invalid_page_request(self, kwargs):
        with pytest.raises(BadRequestError):
            PageRequest(**kwargs)


# ── Listing endpoints ────────────────────────────────────────

@pytest.mark.api
@pytest.mark.asyncio
class TestListingEndpoints:
    async def test_product_listing_filters_and_wraps_page(self, client, seed):
        resp = await client.get("/api/products/search", params={"searchText": "oli", "size": 1})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["pageable"]["totalElements"] == 2
        assert data["pageable"]["totalPages"] == 2
        assert data["pageable"]["first"] is True
        assert data["content"][0]["name"] == "OLIVES"

    async def test_product_listing_by_supplier(self, client, seed):
        resp = await client.get("/api/products", params={"supplierUuid": seed.bakery_uuid})
        assert [p["name"] for p in resp.json()["data"]["content"]] == ["Pa"]

    async def test_invalid_sort_is_400(self, client, seed):
        resp = await client.get("/api/suppliers/filter", params={"sortBy": "hashedPassword"})
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    async def test_invalid_status_is_400(self, client, seed):
        resp = await client.get("/api/orders", params={"status": "LOST"})
        assert resp.status_code == 400

    async def test_supplier_search(self, client, seed):
        resp = await client.get("/api/suppliers/search", params={"searchText": "REUS"})
        assert [s["name"] for s in resp.json()["data"]["content"]] == ["Olis del Camp"]
