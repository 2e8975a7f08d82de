"""Pydantic schemas for Supplier CRUD operations."""

from datetime import datetime

from pydantic import EmailStr, Field

from abasta.models.supplier import Supplier
from abasta.schemas.common import CamelModel


class SupplierRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_name: str | None = Field(None, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    notes: str | None = None
    is_active: bool = True


class SupplierOut(CamelModel):
    uuid: str
    company_uuid: str
    name: str
    contact_name: str | None
    email: str | None
    phone: str | None
    address: str | None
    notes: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_supplier(cls, supplier: Supplier) -> "SupplierOut":
        return cls(
            uuid=supplier.uuid,
            company_uuid=supplier.company.uuid,
            name=supplier.name,
            contact_name=supplier.contact_name,
            email=supplier.email,
            phone=supplier.phone,
            address=supplier.address,
            notes=supplier.notes,
            is_active=supplier.is_active,
            created_at=supplier.created_at,
            updated_at=supplier.updated_at,
        )
