"""Product catalogue router.

Endpoints:
    POST  /api/products/create             Create product
    GET   /api/products                    Filter (per-field, price range)
    GET   /api/products/search             Free-text search
    GET   /api/products/{uuid}             Product detail
    PUT   /api/products/{uuid}             Update product
    PATCH /api/products/deactivate/{uuid}  Soft delete
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.auth.deps import get_caller_email
from abasta.database import get_db
from abasta.routers.params import page_params
from abasta.schemas.common import ApiResponse, PagedResponse
from abasta.schemas.product import ProductOut, ProductRequest
from abasta.services import products as product_service
from abasta.services.filters import ProductFilters
from abasta.utils.pagination import PageRequest

router = APIRouter()


@router.post("/create", response_model=ApiResponse[ProductOut], status_code=status.HTTP_201_CREATED)
async def create_product(
    body: ProductRequest,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    product = await product_service.create_product(db, caller, body)
    return ApiResponse.ok(ProductOut.from_product(product), "Product created")


@router.get("", response_model=ApiResponse[PagedResponse[ProductOut]])
async def filter_products(
    supplier_uuid: str | None = Query(None, alias="supplierUuid"),
    name: str | None = None,
    description: str | None = None,
    category: str | None = None,
    unit: str | None = None,
    volume: Decimal | None = None,
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    is_active: bool | None = Query(None, alias="isActive"),
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    filters = ProductFilters(
        name=name,
        description=description,
        category=category,
        unit=unit,
        volume=volume,
        min_price=min_price,
        max_price=max_price,
        is_active=is_active,
    )
    result = await product_service.filter_products(
        db, caller, filters, page, supplier_uuid=supplier_uuid
    )
    return ApiResponse.ok(PagedResponse.from_page(result, ProductOut.from_product))


@router.get("/search", response_model=ApiResponse[PagedResponse[ProductOut]])
async def search_products(
    search_text: str | None = Query(None, alias="searchText"),
    supplier_uuid: str | None = Query(None, alias="supplierUuid"),
    page: PageRequest = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    result = await product_service.search_products(
        db, caller, search_text, page, supplier_uuid=supplier_uuid
    )
    return ApiResponse.ok(PagedResponse.from_page(result, ProductOut.from_product))


@router.get("/{product_uuid}", response_model=ApiResponse[ProductOut])
async def get_product(
    product_uuid: str,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    product = await product_service.get_product(db, caller, product_uuid)
    return ApiResponse.ok(ProductOut.from_product(product))


@router.put("/{product_uuid}", response_model=ApiResponse[ProductOut])
async def update_product(
    product_uuid: str,
    body: ProductRequest,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    product = await product_service.update_product(db, caller, product_uuid, body)
    return ApiResponse.ok(ProductOut.from_product(product), "Product updated")


@router.patch("/deactivate/{product_uuid}", response_model=ApiResponse[ProductOut])
async def deactivate_product(
    product_uuid: str,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    product = await product_service.deactivate_product(db, caller, product_uuid)
    return ApiResponse.ok(ProductOut.from_product(product), "Product deactivated")
