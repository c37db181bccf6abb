from src.infrastructure.persistence.models.audit_log import AuditLog
# Mixins for model composition
from src.infrastructure.persistence.models.mixins import (CuidMixin,
                                                          MultiTenantModel,
                                                          TenantMixin,
                                                          TimestampMixin)
from src.infrastructure.persistence.models.permission import (
    Permission, RoleTemplatePermission, TenantRolePermission, UserRole)
from src.infrastructure.persistence.models.role import RoleTemplate, TenantRole
from src.infrastructure.persistence.models.tenant import Tenant
from src.infrastructure.persistence.models.user import User

__all__ = [
    # Models
    "Tenant",
    "User",
    "RoleTemplate",
    "TenantRole",
    "Permission",
    "RoleTemplatePermission",
    "TenantRolePermission",
    "UserRole",
    "AuditLog",
    # Mixins
    "CuidMixin",
    "TenantMixin",
    "TimestampMixin",
    "MultiTenantModel",
]
