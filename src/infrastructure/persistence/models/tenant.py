from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.config.settings import get_settings
from src.infrastructure.persistence.database import Base
from src.infrastructure.persistence.models.mixins import (CuidMixin,
                                                          TimestampMixin)


class Tenant(CuidMixin, TimestampMixin, Base):
    """
    Root tenant entity for multi-tenant architecture.

    Note: Tenant does not have a tenant_id since it is the root of the hierarchy.
    Uses CuidMixin and TimestampMixin only (no TenantMixin).

    default_role_id is kept without a database foreign key: tenant_role
    already references tenant, and the reverse key would make the two
    tables mutually dependent for create/drop ordering. The service clears it
    when the referenced role is deleted.
    """

    __tablename__ = "tenant"

    name: Mapped[str] = mapped_column(String, nullable=False)
    max_role_slots: Mapped[int] = mapped_column(
        Integer, nullable=False, default=lambda: get_settings().default_max_role_slots
    )
    default_role_id: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint("max_role_slots >= 0", name="tenant_max_role_slots_check"),
    )
