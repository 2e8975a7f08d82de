"""User management within the caller's company.

Endpoints:
    POST  /api/users                          Add a user (admin)
    GET   /api/users                          List company users
    GET   /api/users/{uuid}                   User detail
    PATCH /api/users/{uuid}/status            Activate / deactivate (admin)
    PATCH /api/users/{uuid}/change-password   Change own password
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.auth.deps import get_caller_email, require_role
from abasta.database import get_db
from abasta.models.user import User, UserRole
from abasta.schemas.common import ApiResponse
from abasta.schemas.user import ChangePasswordRequest, UserCreate, UserOut
from abasta.services import users as user_service
from abasta.services.email import Mailer, get_mailer

router = APIRouter()


@router.post("", response_model=ApiResponse[UserOut], status_code=status.HTTP_201_CREATED)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    admin: User = Depends(require_role(UserRole.ADMIN)),
):
    user = await user_service.register_user(db, mailer, admin.email, body)
    return ApiResponse.ok(UserOut.from_user(user), "User created")


@router.get("", response_model=ApiResponse[list[UserOut]])
async def list_users(
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    users = await user_service.list_users(db, caller)
    return ApiResponse.ok([UserOut.from_user(u) for u in users])


@router.get("/{user_uuid}", response_model=ApiResponse[UserOut])
async def get_user(
    user_uuid: str,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    user = await user_service.get_user(db, caller, user_uuid)
    return ApiResponse.ok(UserOut.from_user(user))


@router.patch("/{user_uuid}/status", response_model=ApiResponse[UserOut])
async def change_status(
    user_uuid: str,
    is_active: bool = Query(..., alias="isActive"),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_role(UserRole.ADMIN)),
):
    user = await user_service.change_user_status(db, admin.email, user_uuid, is_active)
    return ApiResponse.ok(UserOut.from_user(user), "User status updated")


@router.patch("/{user_uuid}/change-password", response_model=ApiResponse[None])
async def change_password(
    user_uuid: str,
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    await user_service.change_password(
        db, caller, user_uuid, body.current_password, body.new_password
    )
    return ApiResponse.ok(message="Password changed")
