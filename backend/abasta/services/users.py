"""User accounts: caller resolution, login and the email-token flows.

Token rules:
  - one verification token and one reset token per user at most
  - issuing a token of a type replaces the previous one of that type
  - a token is cleared as soon as it is used
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.auth.jwt import create_access_token
from abasta.auth.password import generate_token, hash_password, verify_password
from abasta.config import settings
from abasta.middleware.exceptions import (
    BadRequestError,
    DuplicateResourceError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from abasta.models.company import CompanyStatus
from abasta.models.user import User, UserRole
from abasta.schemas.auth import LoginRequest, TokenResponse
from abasta.schemas.user import UserCreate, UserOut
from abasta.services.email import (
    SUBJECT_PASSWORD_RESET,
    SUBJECT_VERIFY_EMAIL,
    Mailer,
    deliver,
    render_email_verification,
    render_password_reset,
)

logger = logging.getLogger("abasta.users")


# ── Lookups ─────────────────────────────────────────────────

async def find_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def resolve_caller(db: AsyncSession, caller_email: str) -> User:
    """The authenticated user behind `caller_email`, or NotFound."""
    user = await find_user_by_email(db, caller_email)
    if not user:
        raise ResourceNotFoundError(f"User not found with email: {caller_email}")
    return user


async def get_user(db: AsyncSession, caller_email: str, user_uuid: str) -> User:
    caller = await resolve_caller(db, caller_email)
    result = await db.execute(select(User).where(User.uuid == user_uuid))
    user = result.scalar_one_or_none()
    if not user or user.company_id != caller.company_id:
        raise ResourceNotFoundError(f"User not found with UUID: {user_uuid}")
    return user


async def list_users(db: AsyncSession, caller_email: str) -> list[User]:
    caller = await resolve_caller(db, caller_email)
    result = await db.execute(
        select(User)
        .where(User.company_id == caller.company_id)
        .order_by(User.last_name, User.first_name, User.id)
    )
    return list(result.scalars().all())


# ── Token helpers ───────────────────────────────────────────

def issue_verification_token(user: User) -> str:
    token = generate_token()
    user.email_verification_token = token
    user.email_verification_expires = datetime.utcnow() + timedelta(
        hours=settings.email_verification_expire_hours
    )
    return token


def issue_reset_token(user: User) -> str:
    token = generate_token()
    user.password_reset_token = token
    user.password_reset_expires = datetime.utcnow() + timedelta(
        hours=settings.password_reset_expire_hours
    )
    return token


def _expired(expires: datetime | None) -> bool:
    return expires is None or expires < datetime.utcnow()


# ── Login ───────────────────────────────────────────────────

async def login(db: AsyncSession, body: LoginRequest) -> TokenResponse:
    user = await find_user_by_email(db, body.email)
    if not user or not verify_password(body.password, user.hashed_password):
        raise BadRequestError("Invalid email or password")
    if not user.is_active:
        raise BadRequestError("User account is inactive")
    if not user.email_verified:
        raise BadRequestError("Email address has not been verified")

    user.last_login = datetime.utcnow()
    await db.flush()
    logger.info("User %s logged in", user.uuid)

    return TokenResponse(
        access_token=create_access_token(user.email),
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserOut.from_user(user),
    )


# ── Email verification ──────────────────────────────────────

async def verify_email(db: AsyncSession, token: str) -> User:
    result = await db.execute(
        select(User).where(User.email_verification_token == token)
    )
    user = result.scalar_one_or_none()
    if not user or _expired(user.email_verification_expires):
        raise BadRequestError("Invalid or expired verification token")

    user.email_verified = True
    user.email_verification_token = None
    user.email_verification_expires = None

    # The registering admin's verification activates the company
    if user.role == UserRole.ADMIN and user.company.status == CompanyStatus.PENDING:
        user.company.status = CompanyStatus.ACTIVE
        logger.info("Company %s activated", user.company.uuid)

    await db.flush()
    logger.info("Email verified for user %s", user.uuid)
    return user


async def resend_verification(db: AsyncSession, mailer: Mailer, email: str) -> None:
    user = await find_user_by_email(db, email)
    if not user:
        raise ResourceNotFoundError(f"User not found with email: {email}")
    if user.email_verified:
        raise BadRequestError("Email address is already verified")

    token = issue_verification_token(user)
    await db.flush()
    await deliver(
        mailer, user.email, SUBJECT_VERIFY_EMAIL,
        render_email_verification(user.first_name, token),
    )


# ── Password reset ──────────────────────────────────────────

async def request_password_reset(db: AsyncSession, mailer: Mailer, email: str) -> None:
    user = await find_user_by_email(db, email)
    if not user:
        raise ResourceNotFoundError(f"User not found with email: {email}")

    token = issue_reset_token(user)
    await db.flush()
    await deliver(
        mailer, user.email, SUBJECT_PASSWORD_RESET,
        render_password_reset(user.first_name, token),
    )
    logger.info("Password reset requested for user %s", user.uuid)


async def reset_password(db: AsyncSession, token: str, new_password: str) -> None:
    result = await db.execute(select(User).where(User.password_reset_token == token))
    user = result.scalar_one_or_none()
    if not user or _expired(user.password_reset_expires):
        raise BadRequestError("Invalid or expired reset token")

    user.hashed_password = hash_password(new_password)
    user.password_reset_token = None
    user.password_reset_expires = None
    await db.flush()
    logger.info("Password reset completed for user %s", user.uuid)


# ── Management ──────────────────────────────────────────────

async def register_user(
    db: AsyncSession,
    mailer: Mailer,
    caller_email: str,
    body: UserCreate,
) -> User:
    """Add a user to the caller's company and send them a verification link."""
    caller = await resolve_caller(db, caller_email)
    if await find_user_by_email(db, body.email):
        raise DuplicateResourceError(f"A user with email {body.email} already exists")

    user = User(
        company=caller.company,
        email=body.email.lower(),
        hashed_password=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        role=body.role,
        is_active=True,
        email_verified=False,
    )
    token = issue_verification_token(user)
    db.add(user)
    await db.flush()

    await deliver(
        mailer, user.email, SUBJECT_VERIFY_EMAIL,
        render_email_verification(user.first_name, token),
    )
    logger.info("User %s added to company %s", user.uuid, caller.company.uuid)
    return user


async def change_user_status(
    db: AsyncSession,
    caller_email: str,
    user_uuid: str,
    is_active: bool,
) -> User:
    user = await get_user(db, caller_email, user_uuid)
    if user.email == caller_email.lower() and not is_active:
        raise BadRequestError("You cannot deactivate your own account")
    user.is_active = is_active
    await db.flush()
    return user


async def change_password(
    db: AsyncSession,
    caller_email: str,
    user_uuid: str,
    current_password: str,
    new_password: str,
) -> None:
    caller = await resolve_caller(db, caller_email)
    if caller.uuid != user_uuid:
        raise PermissionDeniedError("You can only change your own password")
    if not verify_password(current_password, caller.hashed_password):
        raise BadRequestError("Current password is incorrect")

    caller.hashed_password = hash_password(new_password)
    await db.flush()
    logger.info("Password changed for user %s", caller.uuid)
