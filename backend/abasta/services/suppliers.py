"""Supplier management, scoped to the caller's company.

Supplier names are unique per company ignoring case. The check covers
inactive suppliers too, so reactivating never creates a clash.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.middleware.exceptions import (
    DuplicateResourceError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from abasta.models.company import Company
from abasta.models.supplier import Supplier
from abasta.schemas.supplier import SupplierRequest
from abasta.services.filters import SUPPLIER_SORTABLE, SupplierFilters, supplier_predicates
from abasta.services.users import resolve_caller
from abasta.utils.pagination import Page, PageRequest, paginate

logger = logging.getLogger("abasta.suppliers")


async def exists_by_company_uuid_and_name_ignore_case(
    db: AsyncSession,
    company_uuid: str,
    name: str,
    exclude_uuid: str | None = None,
) -> bool:
    stmt = (
        select(Supplier.id)
        .join(Company, Supplier.company_id == Company.id)
        .where(
            Company.uuid == company_uuid,
            func.lower(Supplier.name) == name.strip().lower(),
        )
    )
    if exclude_uuid is not None:
        stmt = stmt.where(Supplier.uuid != exclude_uuid)
    result = await db.execute(stmt.limit(1))
    return result.scalar_one_or_none() is not None


async def get_supplier(db: AsyncSession, supplier_uuid: str) -> Supplier:
    result = await db.execute(select(Supplier).where(Supplier.uuid == supplier_uuid))
    supplier = result.scalar_one_or_none()
    if not supplier:
        raise ResourceNotFoundError(f"Supplier not found with UUID: {supplier_uuid}")
    return supplier


async def get_company_supplier(
    db: AsyncSession,
    company_id: int,
    supplier_uuid: str,
) -> Supplier:
    """Supplier by UUID, treating other companies' suppliers as missing."""
    supplier = await get_supplier(db, supplier_uuid)
    if supplier.company_id != company_id:
        raise ResourceNotFoundError(f"Supplier not found with UUID: {supplier_uuid}")
    return supplier


async def get_caller_supplier(
    db: AsyncSession,
    caller_email: str,
    supplier_uuid: str,
) -> Supplier:
    caller = await resolve_caller(db, caller_email)
    return await get_company_supplier(db, caller.company_id, supplier_uuid)


def _apply(supplier: Supplier, body: SupplierRequest) -> None:
    supplier.name = body.name.strip()
    supplier.contact_name = body.contact_name
    supplier.email = body.email
    supplier.phone = body.phone
    supplier.address = body.address
    supplier.notes = body.notes
    supplier.is_active = body.is_active


async def create_supplier(
    db: AsyncSession,
    caller_email: str,
    body: SupplierRequest,
) -> Supplier:
    caller = await resolve_caller(db, caller_email)
    company = caller.company

    if await exists_by_company_uuid_and_name_ignore_case(db, company.uuid, body.name):
        raise DuplicateResourceError(
            f"A supplier named '{body.name}' already exists in this company"
        )

    supplier = Supplier(company=company)
    _apply(supplier, body)
    db.add(supplier)
    await db.flush()
    logger.info("Supplier %s created for company %s", supplier.uuid, company.uuid)
    return supplier


async def update_supplier(
    db: AsyncSession,
    caller_email: str,
    supplier_uuid: str,
    body: SupplierRequest,
) -> Supplier:
    caller = await resolve_caller(db, caller_email)
    supplier = await get_company_supplier(db, caller.company_id, supplier_uuid)

    if await exists_by_company_uuid_and_name_ignore_case(
        db, caller.company.uuid, body.name, exclude_uuid=supplier.uuid
    ):
        raise DuplicateResourceError(
            f"A supplier named '{body.name}' already exists in this company"
        )

    _apply(supplier, body)
    await db.flush()
    return supplier


async def toggle_supplier_status(
    db: AsyncSession,
    caller_email: str,
    supplier_uuid: str,
    is_active: bool,
) -> Supplier:
    caller = await resolve_caller(db, caller_email)
    supplier = await get_company_supplier(db, caller.company_id, supplier_uuid)
    supplier.is_active = is_active
    await db.flush()
    logger.info("Supplier %s is_active=%s", supplier.uuid, is_active)
    return supplier


async def list_suppliers_by_company(
    db: AsyncSession,
    caller_email: str,
    company_uuid: str,
    page_request: PageRequest,
) -> Page:
    caller = await resolve_caller(db, caller_email)
    if caller.company.uuid != company_uuid:
        raise PermissionDeniedError("You can only list your own company's suppliers")

    filters = SupplierFilters(company_id=caller.company_id)
    return await paginate(
        db, Supplier, supplier_predicates(filters), page_request, SUPPLIER_SORTABLE
    )


async def search_suppliers(
    db: AsyncSession,
    caller_email: str,
    search_text: str | None,
    page_request: PageRequest,
) -> Page:
    caller = await resolve_caller(db, caller_email)
    filters = SupplierFilters(company_id=caller.company_id, search_text=search_text)
    return await paginate(
        db, Supplier, supplier_predicates(filters), page_request, SUPPLIER_SORTABLE
    )


async def filter_suppliers(
    db: AsyncSession,
    caller_email: str,
    filters: SupplierFilters,
    page_request: PageRequest,
) -> Page:
    caller = await resolve_caller(db, caller_email)
    filters.company_id = caller.company_id
    return await paginate(
        db, Supplier, supplier_predicates(filters), page_request, SUPPLIER_SORTABLE
    )
