"""Pydantic schemas for company registration and lookup."""

from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from abasta.models.company import CompanyStatus
from abasta.schemas.common import CamelModel
from abasta.schemas.validators import validate_password_strength


class CompanyRegisterRequest(CamelModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    tax_id: str = Field(..., min_length=1, max_length=50)
    company_email: EmailStr
    company_phone: str | None = Field(None, max_length=50)
    company_address: str | None = None
    company_city: str | None = Field(None, max_length=100)
    company_postal_code: str | None = Field(None, max_length=20)

    admin_email: EmailStr
    admin_password: str
    admin_first_name: str = Field(..., min_length=1, max_length=100)
    admin_last_name: str = Field(..., min_length=1, max_length=100)
    admin_phone: str | None = Field(None, max_length=50)

    @field_validator("admin_password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class CompanyOut(CamelModel):
    uuid: str
    name: str
    tax_id: str
    email: str
    phone: str | None
    address: str | None
    city: str | None
    postal_code: str | None
    status: CompanyStatus
    created_at: datetime
    updated_at: datetime
