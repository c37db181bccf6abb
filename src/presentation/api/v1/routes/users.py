from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.services.user_management_service import \
    UserManagementService
from src.infrastructure.persistence.models.user import User
from src.infrastructure.persistence.repositories.user_repo import \
    UserRepository
from src.infrastructure.persistence.repositories.user_role_repo import \
    UserRoleRepository
from src.presentation.api.dependencies import (CurrentTenant, DbSession,
                                               get_user_management_service,
                                               require_permission)
from src.presentation.api.v1.schemas.token import TokenPayload
from src.presentation.api.v1.schemas.user import UserResponse, UserUpdate

router = APIRouter()


async def _to_response(db: AsyncSession, user: User) -> UserResponse:
    assignment = await UserRoleRepository(db).get_for_user(user.id, user.tenant_id)
    response = UserResponse.model_validate(user)
    response.tenant_role_id = assignment.tenant_role_id if assignment else None
    return response


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    tenant: CurrentTenant,
    db: DbSession,
    _: Annotated[TokenPayload, Depends(require_permission("users.read"))],
):
    """Get a tenant member with their role and manager"""
    user = await UserRepository(db).get_by_id_and_tenant(user_id, tenant.id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return await _to_response(db, user)


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    data: UserUpdate,
    tenant: CurrentTenant,
    db: DbSession,
    service: Annotated[UserManagementService, Depends(get_user_management_service)],
    current_user: Annotated[TokenPayload, Depends(require_permission("users.update"))],
):
    """
    Update a user's profile, manager or role.

    Changing tenantRoleId additionally requires roles.assign.
    """
    user = await service.update_user(
        tenant.id, user_id, data.model_dump(exclude_unset=True), actor_id=current_user.sub
    )
    return await _to_response(db, user)
