"""Product catalogue. Products belong to a supplier of the caller's company."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.middleware.exceptions import ResourceNotFoundError
from abasta.models.product import Product
from abasta.models.supplier import Supplier
from abasta.schemas.product import ProductRequest
from abasta.services.filters import PRODUCT_SORTABLE, ProductFilters, product_predicates
from abasta.services.suppliers import get_company_supplier
from abasta.services.users import resolve_caller
from abasta.utils.pagination import Page, PageRequest, paginate

logger = logging.getLogger("abasta.products")


async def find_product(db: AsyncSession, product_uuid: str) -> Product | None:
    result = await db.execute(select(Product).where(Product.uuid == product_uuid))
    return result.scalar_one_or_none()


async def get_product(db: AsyncSession, caller_email: str, product_uuid: str) -> Product:
    caller = await resolve_caller(db, caller_email)
    product = await find_product(db, product_uuid)
    if not product or product.supplier.company_id != caller.company_id:
        raise ResourceNotFoundError(f"Product not found with UUID: {product_uuid}")
    return product


def _apply(product: Product, body: ProductRequest, supplier: Supplier) -> None:
    product.supplier = supplier
    product.category = body.category
    product.name = body.name.strip()
    product.description = body.description
    product.price = body.price
    product.unit = body.unit
    product.volume = body.volume
    product.image_url = body.image_url


async def create_product(
    db: AsyncSession,
    caller_email: str,
    body: ProductRequest,
) -> Product:
    caller = await resolve_caller(db, caller_email)
    supplier = await get_company_supplier(db, caller.company_id, body.supplier_uuid)

    product = Product(is_active=True)
    _apply(product, body, supplier)
    db.add(product)
    await db.flush()
    logger.info("Product %s created for supplier %s", product.uuid, supplier.uuid)
    return product


async def update_product(
    db: AsyncSession,
    caller_email: str,
    product_uuid: str,
    body: ProductRequest,
) -> Product:
    caller = await resolve_caller(db, caller_email)
    product = await get_product(db, caller_email, product_uuid)
    supplier = await get_company_supplier(db, caller.company_id, body.supplier_uuid)

    # Existing order items keep their snapshot price
    _apply(product, body, supplier)
    await db.flush()
    return product


async def deactivate_product(db: AsyncSession, caller_email: str, product_uuid: str) -> Product:
    product = await get_product(db, caller_email, product_uuid)
    product.is_active = False
    await db.flush()
    logger.info("Product %s deactivated", product.uuid)
    return product


async def filter_products(
    db: AsyncSession,
    caller_email: str,
    filters: ProductFilters,
    page_request: PageRequest,
    supplier_uuid: str | None = None,
) -> Page:
    """Scope by supplier when one is named, otherwise by the caller's company."""
    caller = await resolve_caller(db, caller_email)
    if supplier_uuid:
        supplier = await get_company_supplier(db, caller.company_id, supplier_uuid)
        filters.supplier_id = supplier.id
        filters.company_id = None
    else:
        filters.company_id = caller.company_id
    return await paginate(
        db, Product, product_predicates(filters), page_request, PRODUCT_SORTABLE
    )


async def search_products(
    db: AsyncSession,
    caller_email: str,
    search_text: str | None,
    page_request: PageRequest,
    supplier_uuid: str | None = None,
) -> Page:
    return await filter_products(
        db,
        caller_email,
        ProductFilters(search_text=search_text),
        page_request,
        supplier_uuid=supplier_uuid,
    )
