"""Pydantic schemas for login and the email-token flows."""

from pydantic import EmailStr, Field, field_validator

from abasta.schemas.common import CamelModel
from abasta.schemas.user import UserOut
from abasta.schemas.validators import validate_password_strength


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds
    user: UserOut


class EmailRequest(CamelModel):
    """Body for forgot-password and resend-verification."""
    email: EmailStr


class VerifyEmailRequest(CamelModel):
    token: str = Field(..., min_length=1)


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)
