from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from src.application.services.assignment_graph_validator import \
    AssignmentGraphValidator
from src.infrastructure.persistence.repositories.user_role_repo import \
    UserRoleRepository
from src.presentation.api.dependencies import (CurrentTenant, DbSession,
                                               get_assignment_validator,
                                               require_permission)
from src.presentation.api.v1.schemas.role import (UserRoleAssign,
                                                  UserRoleResponse)
from src.presentation.api.v1.schemas.token import TokenPayload

router = APIRouter()

Validator = Annotated[AssignmentGraphValidator, Depends(get_assignment_validator)]


@router.get("/tenant/user-roles", response_model=list[UserRoleResponse])
async def list_user_roles(
    tenant: CurrentTenant,
    db: DbSession,
    _: Annotated[TokenPayload, Depends(require_permission("roles.read"))],
):
    """Every role assignment in the tenant"""
    assignments = await UserRoleRepository(db).get_by_tenant(tenant.id)
    return [UserRoleResponse.model_validate(a) for a in assignments]


@router.post("/tenant/user-roles", response_model=UserRoleResponse, status_code=status.HTTP_201_CREATED)
async def assign_role(
    data: UserRoleAssign,
    tenant: CurrentTenant,
    validator: Validator,
    current_user: Annotated[TokenPayload, Depends(require_permission("roles.assign"))],
):
    """Assign a role to a user, replacing the role they hold"""
    assignment = await validator.assign_role(
        data.user_id, data.tenant_role_id, tenant.id, assigned_by=current_user.sub
    )
    return UserRoleResponse.model_validate(assignment)


@router.delete("/tenant/user-roles/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_role(
    user_id: str,
    tenant: CurrentTenant,
    validator: Validator,
    current_user: Annotated[TokenPayload, Depends(require_permission("roles.assign"))],
):
    """Remove a user's role assignment"""
    await validator.unassign_role(user_id, tenant.id, actor_id=current_user.sub)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
