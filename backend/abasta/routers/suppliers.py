"""Supplier management router.

Endpoints:
    POST  /api/suppliers                        Create supplier
    GET   /api/suppliers/search?searchText=     Free-text search (active only)
    GET   /api/suppliers/filter                 Per-field filters
    GET   /api/suppliers/company/{companyUuid}  All active suppliers of a company
    GET   /api/suppliers/{uuid}                 Supplier detail
    PUT   /api/suppliers/{uuid}                 Update supplier
    PATCH /api/suppliers/{uuid}/status          Activate / deactivate (soft delete)
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.auth.deps import get_caller_email
from abasta.database import get_db
from abasta.routers.params import page_params
from abasta.schemas.common import ApiResponse, PagedResponse
from abasta.schemas.supplier import SupplierOut, SupplierRequest
from abasta.services import suppliers as supplier_service
from abasta.services.filters import SupplierFilters
from abasta.utils.pagination import PageRequest

router = APIRouter()


@router.post("", response_model=ApiResponse[SupplierOut], status_code=status.HTTP_201_CREATED)
async def create_supplier(
    body: SupplierRequest,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    supplier = await supplier_service.create_supplier(db, caller, body)
    return ApiResponse.ok(SupplierOut.from_supplier(supplier), "Supplier created")


@router.get("/search", response_model=ApiResponse[PagedResponse[SupplierOut]])
async def search_suppliers(
    search_text: str | None = Query(None, alias="searchText"),
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    result = await supplier_service.search_suppliers(db, caller, search_text, page)
    return ApiResponse.ok(PagedResponse.from_page(result, SupplierOut.from_supplier))


@router.get("/filter", response_model=ApiResponse[PagedResponse[SupplierOut]])
async def filter_suppliers(
    name: str | None = None,
    contact_name: str | None = Query(None, alias="contactName"),
    email: str | None = None,
    phone: str | None = None,
    address: str | None = None,
    is_active: bool | None = Query(None, alias="isActive"),
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    filters = SupplierFilters(
        name=name,
        contact_name=contact_name,
        email=email,
        phone=phone,
        address=address,
        is_active=is_active,
    )
    result = await supplier_service.filter_suppliers(db, caller, filters, page)
    return ApiResponse.ok(PagedResponse.from_page(result, SupplierOut.from_supplier))


@router.get("/company/{company_uuid}", response_model=ApiResponse[PagedResponse[SupplierOut]])
async def list_company_suppliers(
    company_uuid: str,
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    result = await supplier_service.list_suppliers_by_company(db, caller, company_uuid, page)
    return ApiResponse.ok(PagedResponse.from_page(result, SupplierOut.from_supplier))


@router.get("/{supplier_uuid}", response_model=ApiResponse[SupplierOut])
async def get_supplier(
    supplier_uuid: str,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    supplier = await supplier_service.get_caller_supplier(db, caller, supplier_uuid)
    return ApiResponse.ok(SupplierOut.from_supplier(supplier))


@router.put("/{supplier_uuid}", response_model=ApiResponse[SupplierOut])
async def update_supplier(
    supplier_uuid: str,
    body: SupplierRequest,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    supplier = await supplier_service.update_supplier(db, caller, supplier_uuid, body)
    return ApiResponse.ok(SupplierOut.from_supplier(supplier), "Supplier updated")


@router.patch("/{supplier_uuid}/status", response_model=ApiResponse[SupplierOut])
async def toggle_status(
    supplier_uuid: str,
    is_active: bool = Query(..., alias="isActive"),
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    supplier = await supplier_service.toggle_supplier_status(db, caller, supplier_uuid, is_active)
    return ApiResponse.ok(SupplierOut.from_supplier(supplier), "Supplier status updated")
