from sqlalchemy import (Boolean, ForeignKey, Integer, String, Text,
                        UniqueConstraint)
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.database import Base
from src.infrastructure.persistence.models.mixins import (CuidMixin,
                                                          MultiTenantModel,
                                                          TimestampMixin)


class RoleTemplate(CuidMixin, TimestampMixin, Base):
    """
    Tenant-independent role blueprint, grouped into named sets ("generic",
    "education").

    Inherits from:
        - CuidMixin: CUID primary key
        - TimestampMixin: Created/updated timestamps
    """

    __tablename__ = "role_template"

    template_set_name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    role_name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    slot_position: Mapped[int] = mapped_column(Integer, nullable=False)
    is_default_set: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("template_set_name", "role_name", name="uq_role_template_set_name"),
    )


class TenantRole(MultiTenantModel, Base):
    """
    Concrete role owned by one tenant.

    Inherits from MultiTenantModel:
        - id: CUID primary key
        - tenant_id: Foreign key to tenant
        - created_at: Creation timestamp
        - updated_at: Last update timestamp
    """

    __tablename__ = "tenant_role"

    role_alias: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    slot_position: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # True for roles such as Guest that must not consume a plan slot
    does_not_count_toward_slot_limit: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    created_from_template_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("role_template.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "role_alias", name="uq_tenant_role_alias"),
        UniqueConstraint("tenant_id", "slot_position", name="uq_tenant_role_slot"),
    )
