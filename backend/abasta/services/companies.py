"""Company registration and lookup.

Registration creates the company in PENDING together with its first
ADMIN user. The company becomes ACTIVE when that admin verifies their
email (see abasta.services.users.verify_email).
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.auth.password import hash_password
from abasta.middleware.exceptions import DuplicateResourceError, ResourceNotFoundError
from abasta.models.company import Company, CompanyStatus
from abasta.models.user import User, UserRole
from abasta.schemas.company import CompanyRegisterRequest
from abasta.services.email import (
    SUBJECT_VERIFY_COMPANY,
    Mailer,
    deliver,
    render_company_verification,
)
from abasta.services.users import find_user_by_email, issue_verification_token, resolve_caller

logger = logging.getLogger("abasta.companies")


async def register_company(
    db: AsyncSession,
    mailer: Mailer,
    body: CompanyRegisterRequest,
) -> Company:
    existing = await db.execute(select(Company.id).where(Company.tax_id == body.tax_id))
    if existing.scalar_one_or_none() is not None:
        raise DuplicateResourceError(f"A company with tax ID {body.tax_id} already exists")
    if await find_user_by_email(db, body.admin_email):
        raise DuplicateResourceError(
            f"A user with email {body.admin_email} already exists"
        )

    company = Company(
        name=body.company_name,
        tax_id=body.tax_id,
        email=body.company_email,
        phone=body.company_phone,
        address=body.company_address,
        city=body.company_city,
        postal_code=body.company_postal_code,
        status=CompanyStatus.PENDING,
    )
    admin = User(
        company=company,
        email=body.admin_email.lower(),
        hashed_password=hash_password(body.admin_password),
        first_name=body.admin_first_name,
        last_name=body.admin_last_name,
        phone=body.admin_phone,
        role=UserRole.ADMIN,
        is_active=True,
        email_verified=False,
    )
    token = issue_verification_token(admin)
    db.add_all([company, admin])
    await db.flush()

    await deliver(
        mailer, admin.email, SUBJECT_VERIFY_COMPANY,
        render_company_verification(admin.first_name, company.name, token),
    )
    logger.info("Company %s registered (%s)", company.uuid, company.name)
    return company


async def get_company(db: AsyncSession, company_uuid: str) -> Company:
    result = await db.execute(select(Company).where(Company.uuid == company_uuid))
    company = result.scalar_one_or_none()
    if not company:
        raise ResourceNotFoundError(f"Company not found with UUID: {company_uuid}")
    return company


async def get_caller_company(db: AsyncSession, caller_email: str) -> Company:
    caller = await resolve_caller(db, caller_email)
    return caller.company


async def change_company_status(
    db: AsyncSession,
    company_uuid: str,
    status: CompanyStatus,
) -> Company:
    company = await get_company(db, company_uuid)
    company.status = status
    await db.flush()
    logger.info("Company %s status set to %s", company.uuid, status.value)
    return company
