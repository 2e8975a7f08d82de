"""Auth routes: login and the email-token flows. All public.

Route overview:
  POST /login                — email + password → bearer token (60 min)
  POST /forgot-password      — email a password reset link
  POST /reset-password       — set a new password with a reset token
  POST /verify-email         — confirm an email address with its token
  POST /resend-verification  — issue a fresh verification token
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.database import get_db
from abasta.schemas.auth import (
    EmailRequest,
    LoginRequest,
    ResetPasswordRequest,
    TokenResponse,
    VerifyEmailRequest,
)
from abasta.schemas.common import ApiResponse
from abasta.services import users as user_service
from abasta.services.email import Mailer, get_mailer

router = APIRouter()


@router.post("/login", response_model=ApiResponse[TokenResponse])
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    token = await user_service.login(db, body)
    return ApiResponse.ok(token, "Login successful")


@router.post("/forgot-password", response_model=ApiResponse[None])
async def forgot_password(
    body: EmailRequest,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    await user_service.request_password_reset(db, mailer, body.email)
    return ApiResponse.ok(message="Password reset email sent")


@router.post("/reset-password", response_model=ApiResponse[None])
async def reset_password(body: ResetPasswordRequest, db: AsyncSession = Depends(get_db)):
    await user_service.reset_password(db, body.token, body.new_password)
    return ApiResponse.ok(message="Password has been reset")


@router.post("/verify-email", response_model=ApiResponse[None])
async def verify_email(body: VerifyEmailRequest, db: AsyncSession = Depends(get_db)):
    await user_service.verify_email(db, body.token)
    return ApiResponse.ok(message="Email verified")


@router.post("/resend-verification", response_model=ApiResponse[None])
async def resend_verification(
    body: EmailRequest,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    await user_service.resend_verification(db, mailer, body.email)
    return ApiResponse.ok(message="Verification email sent")
