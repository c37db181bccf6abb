from datetime import datetime

from pydantic import Field

from src.presentation.api.v1.schemas.base import CamelModel


class UserUpdate(CamelModel):
    """
    Schema for updating a user; omitted fields are left unchanged.

    Sending reportsToUserId as null clears the manager. Changing
    tenantRoleId requires roles.assign in addition to users.update.
    """

    email: str | None = Field(None, max_length=320)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    is_active: bool | None = None
    reports_to_user_id: str | None = None
    tenant_role_id: str | None = None


class UserResponse(CamelModel):
    """Schema for user response"""

    id: str
    tenant_id: str | None
    username: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    reports_to_user_id: str | None = None
    is_active: bool
    tenant_role_id: str | None = None
    created_at: datetime
    updated_at: datetime
