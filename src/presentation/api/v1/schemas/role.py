from datetime import datetime

from pydantic import Field

from src.presentation.api.v1.schemas.base import CamelModel


# Permission Schemas
class PermissionSummary(CamelModel):
    """Permission as embedded in role responses"""

    id: str
    name: str
    display_name: str
    category: str


class PermissionResponse(PermissionSummary):
    description: str | None = None


class PermissionCatalogResponse(CamelModel):
    """Active permissions, flat and grouped by category"""

    permissions: list[PermissionResponse]
    grouped: dict[str, list[PermissionResponse]]
    total: int


# Tenant Role Schemas
class TemplateRefResponse(CamelModel):
    id: str
    template_set_name: str
    role_name: str


class TenantRoleResponse(CamelModel):
    """Schema for tenant role response"""

    id: str
    role_alias: str
    description: str | None = None
    slot_position: int
    is_active: bool
    does_not_count_toward_slot_limit: bool
    created_from_template: TemplateRefResponse | None = None
    modified_from_template: bool
    permissions: list[PermissionSummary] = []
    permission_count: int
    user_count: int
    created_at: datetime
    updated_at: datetime


class TenantRoleDetailResponse(TenantRoleResponse):
    """Role response with permissions grouped by category"""

    permissions_by_category: dict[str, list[PermissionSummary]] = {}


class TenantSummary(CamelModel):
    id: str
    name: str
    max_role_slots: int


class TenantRoleListResponse(CamelModel):
    tenant: TenantSummary
    roles: list[TenantRoleResponse]
    used_slots: int
    available_slots: int


class TenantRoleCreate(CamelModel):
    """
    Schema for creating a role.

    Permissions come from permission_ids; when that list is empty and
    template_id is given, the template's permissions are copied.
    """

    role_alias: str = Field(..., max_length=100, description="Role name, unique within the tenant")
    description: str | None = Field(None, description="Role description")
    slot_position: int | None = Field(None, ge=1, description="Explicit slot; next free slot when omitted")
    permission_ids: list[str] = Field(default_factory=list)
    template_id: str | None = Field(None, description="Role template this role is based on")


class TenantRoleUpdate(CamelModel):
    """Schema for updating a role; omitted fields are left unchanged"""

    role_alias: str | None = Field(None, max_length=100)
    description: str | None = None
    is_active: bool | None = None
    permission_ids: list[str] | None = Field(None, description="Replaces the whole permission set")


class RoleInitializeRequest(CamelModel):
    template_set_name: str | None = Field(None, description="Template set; the configured default when omitted")


class InitializedRole(CamelModel):
    id: str
    role_alias: str
    slot_position: int
    permission_count: int


class RoleInitializeResponse(CamelModel):
    success: bool
    message: str
    roles: list[InitializedRole]


class DeleteResponse(CamelModel):
    success: bool
    message: str


# Role Template Schemas
class RoleTemplateResponse(CamelModel):
    id: str
    role_name: str
    description: str | None = None
    slot_position: int
    permission_ids: list[str]
    permission_count: int


class RoleTemplateSetResponse(CamelModel):
    name: str
    is_default: bool
    templates: list[RoleTemplateResponse]


# User Role Schemas
class UserRoleAssign(CamelModel):
    """Schema for assigning a role to a user (replaces any current role)"""

    user_id: str
    tenant_role_id: str


class UserRoleResponse(CamelModel):
    id: str
    user_id: str
    tenant_id: str
    tenant_role_id: str
    assigned_by: str | None = None
    assigned_at: datetime
