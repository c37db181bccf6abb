from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.application.services.tenant_role_service import TenantRoleService
from src.presentation.api.dependencies import (CurrentTenant,
                                               get_tenant_role_service,
                                               require_permission)
from src.presentation.api.v1.schemas.role import (DeleteResponse,
                                                  InitializedRole,
                                                  RoleInitializeRequest,
                                                  RoleInitializeResponse,
                                                  TenantRoleCreate,
                                                  TenantRoleDetailResponse,
                                                  TenantRoleListResponse,
                                                  TenantRoleResponse,
                                                  TenantRoleUpdate)
from src.presentation.api.v1.schemas.token import TokenPayload

router = APIRouter()

RoleService = Annotated[TenantRoleService, Depends(get_tenant_role_service)]


@router.get("/tenant/roles", response_model=TenantRoleListResponse)
async def list_roles(
    tenant: CurrentTenant,
    service: RoleService,
    _: Annotated[TokenPayload, Depends(require_permission("roles.read"))],
):
    """List the tenant's roles with slot usage"""
    listing = await service.list_roles(tenant.id)
    return TenantRoleListResponse.model_validate(listing)


@router.post("/tenant/roles", response_model=TenantRoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    data: TenantRoleCreate,
    tenant: CurrentTenant,
    service: RoleService,
    current_user: Annotated[TokenPayload, Depends(require_permission("roles.create"))],
):
    """Create a role in the next free (or the requested) slot"""
    view = await service.create_role(
        tenant.id,
        actor_id=current_user.sub,
        role_alias=data.role_alias,
        description=data.description,
        slot_position=data.slot_position,
        permission_ids=data.permission_ids,
        template_id=data.template_id,
    )
    return TenantRoleResponse.model_validate(view)


@router.put("/tenant/roles", response_model=RoleInitializeResponse)
async def initialize_roles(
    tenant: CurrentTenant,
    service: RoleService,
    current_user: Annotated[TokenPayload, Depends(require_permission("roles.create"))],
    data: RoleInitializeRequest | None = None,
):
    """
    Bootstrap a tenant without roles from a template set.

    Templates whose slot exceeds the tenant's plan are skipped. Fails when
    the tenant already has roles other than Guest.
    """
    template_set_name = data.template_set_name if data else None
    created = await service.initialize_roles(tenant.id, current_user.sub, template_set_name)
    return RoleInitializeResponse(
        success=True,
        message=f"Initialized {len(created)} roles",
        roles=[
            InitializedRole(
                id=projected.role.id,
                role_alias=projected.role.role_alias,
                slot_position=projected.role.slot_position,
                permission_count=projected.permission_count,
            )
            for projected in created
        ],
    )


@router.get("/tenant/roles/{role_id}", response_model=TenantRoleDetailResponse)
async def get_role(
    role_id: str,
    tenant: CurrentTenant,
    service: RoleService,
    _: Annotated[TokenPayload, Depends(require_permission("roles.read"))],
):
    """Get a role with its permissions grouped by category"""
    detail = await service.get_role(tenant.id, role_id)
    return TenantRoleDetailResponse.model_validate(detail)


@router.put("/tenant/roles/{role_id}", response_model=TenantRoleDetailResponse)
async def update_role(
    role_id: str,
    data: TenantRoleUpdate,
    tenant: CurrentTenant,
    service: RoleService,
    current_user: Annotated[TokenPayload, Depends(require_permission("roles.update"))],
):
    """Update alias, description, active flag or the whole permission set"""
    detail = await service.update_role(
        tenant.id, role_id, data.model_dump(exclude_unset=True), actor_id=current_user.sub
    )
    return TenantRoleDetailResponse.model_validate(detail)


@router.delete("/tenant/roles/{role_id}", response_model=DeleteResponse)
async def delete_role(
    role_id: str,
    tenant: CurrentTenant,
    service: RoleService,
    current_user: Annotated[TokenPayload, Depends(require_permission("roles.delete"))],
):
    """Delete a role that no user holds"""
    await service.delete_role(tenant.id, role_id, actor_id=current_user.sub)
    return DeleteResponse(success=True, message="Role deleted successfully")
