"""Company routes.

Endpoints:
    POST  /api/companies/register        Register company + admin (public)
    GET   /api/companies/me              Caller's company
    GET   /api/companies/{uuid}          Company by UUID (own company only)
    PATCH /api/companies/{uuid}/status   Change status (admin)
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.auth.deps import get_caller_email, require_role
from abasta.database import get_db
from abasta.middleware.exceptions import PermissionDeniedError
from abasta.models.company import CompanyStatus
from abasta.models.user import User, UserRole
from abasta.schemas.common import ApiResponse
from abasta.schemas.company import CompanyOut, CompanyRegisterRequest
from abasta.services import companies as company_service
from abasta.services.email import Mailer, get_mailer

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[CompanyOut],
    status_code=status.HTTP_201_CREATED,
)
async def register_company(
    body: CompanyRegisterRequest,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """Create a PENDING company and its admin, then email the verification link."""
    company = await company_service.register_company(db, mailer, body)
    return ApiResponse.ok(
        CompanyOut.model_validate(company),
        "Company registered. Check your email to verify the account",
    )


@router.get("/me", response_model=ApiResponse[CompanyOut])
async def my_company(
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    company = await company_service.get_caller_company(db, caller)
    return ApiResponse.ok(CompanyOut.model_validate(company))


@router.get("/{company_uuid}", response_model=ApiResponse[CompanyOut])
async def get_company(
    company_uuid: str,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    own = await company_service.get_caller_company(db, caller)
    if own.uuid != company_uuid:
        raise PermissionDeniedError("You can only view your own company")
    return ApiResponse.ok(CompanyOut.model_validate(own))


@router.patch("/{company_uuid}/status", response_model=ApiResponse[CompanyOut])
async def change_status(
    company_uuid: str,
    new_status: CompanyStatus = Query(..., alias="status"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_role(UserRole.ADMIN)),
):
    if admin.company.uuid != company_uuid:
        raise PermissionDeniedError("You can only change your own company")
    company = await company_service.change_company_status(db, company_uuid, new_status)
    return ApiResponse.ok(CompanyOut.model_validate(company), "Company status updated")
