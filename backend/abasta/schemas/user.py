from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from abasta.models.user import User, UserRole
from abasta.schemas.common import CamelModel
from abasta.schemas.validators import validate_password_strength


class UserCreate(CamelModel):
    email: EmailStr
    password: str
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=50)
    role: UserRole = UserRole.USER

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class UserOut(CamelModel):
    uuid: str
    email: str
    first_name: str
    last_name: str
    phone: str | None
    role: UserRole
    is_active: bool
    email_verified: bool
    company_uuid: str
    last_login: datetime | None
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            uuid=user.uuid,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            phone=user.phone,
            role=user.role,
            is_active=user.is_active,
            email_verified=user.email_verified,
            company_uuid=user.company.uuid,
            last_login=user.last_login,
            created_at=user.created_at,
        )
