"""Pydantic schemas for the product catalogue."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from abasta.models.product import Product
from abasta.schemas.common import CamelModel, Money


class ProductRequest(CamelModel):
    supplier_uuid: str
    category: str | None = Field(None, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    unit: str | None = Field(None, max_length=50)
    volume: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    image_url: str | None = Field(None, max_length=500)


class ProductOut(CamelModel):
    uuid: str
    supplier_uuid: str
    supplier_name: str
    category: str | None
    name: str
    description: str | None
    price: Money
    unit: str | None
    volume: Money | None
    image_url: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_product(cls, product: Product) -> "ProductOut":
        return cls(
            uuid=product.uuid,
            supplier_uuid=product.supplier.uuid,
            supplier_name=product.supplier.name,
            category=product.category,
            name=product.name,
            description=product.description,
            price=product.price,
            unit=product.unit,
            volume=product.volume,
            image_url=product.image_url,
            is_active=product.is_active,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
