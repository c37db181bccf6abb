from datetime import datetime

from sqlalchemy import (Boolean, DateTime, ForeignKey, Index, String, Text,
                        UniqueConstraint)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.infrastructure.persistence.database import Base
from src.infrastructure.persistence.models.mixins import CuidMixin, TenantMixin


class Permission(CuidMixin, Base):
    """
    Global capability (e.g., 'roles.assign', 'users.update').

    Reference data shared by all tenants; seeded, never edited through the API.
    """

    __tablename__ = "permission"

    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class RoleTemplatePermission(CuidMixin, Base):
    """Many-to-many: role templates ←→ permissions."""

    __tablename__ = "role_template_permission"

    role_template_id: Mapped[str] = mapped_column(
        String, ForeignKey("role_template.id", ondelete="CASCADE"), nullable=False
    )
    permission_id: Mapped[str] = mapped_column(
        String, ForeignKey("permission.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("role_template_id", "permission_id", name="uq_role_template_permission"),
    )


class TenantRolePermission(CuidMixin, Base):
    """Many-to-many: tenant roles ←→ permissions."""

    __tablename__ = "tenant_role_permission"

    tenant_role_id: Mapped[str] = mapped_column(
        String, ForeignKey("tenant_role.id", ondelete="CASCADE"), nullable=False, index=True
    )
    permission_id: Mapped[str] = mapped_column(
        String, ForeignKey("permission.id", ondelete="CASCADE"), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("tenant_role_id", "permission_id", name="uq_tenant_role_permission"),
    )


class UserRole(CuidMixin, TenantMixin, Base):
    """
    A user's role within a tenant.

    Inherits from:
        - CuidMixin: CUID primary key
        - TenantMixin: Tenant foreign key

    The (user_id, tenant_id) constraint enforces a single live assignment.
    """

    __tablename__ = "user_role"

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )
    tenant_role_id: Mapped[str] = mapped_column(
        String, ForeignKey("tenant_role.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Actor user id, or "system" for automatic default-role assignment
    assigned_by: Mapped[str | None] = mapped_column(String, nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint("user_id", "tenant_id", name="uq_user_role_user_tenant"),
        Index("ix_user_role_lookup", "tenant_id", "user_id"),
    )
