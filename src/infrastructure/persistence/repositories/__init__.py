""" Repository module for the persistence layer. """

from src.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from src.infrastructure.persistence.repositories.base import BaseRepository
from src.infrastructure.persistence.repositories.permission_repo import PermissionRepository
from src.infrastructure.persistence.repositories.role_repo import TenantRoleRepository
from src.infrastructure.persistence.repositories.role_template_repo import RoleTemplateRepository
from src.infrastructure.persistence.repositories.tenant_repo import TenantRepository
from src.infrastructure.persistence.repositories.user_repo import UserRepository
from src.infrastructure.persistence.repositories.user_role_repo import UserRoleRepository

__all__ = [
    "BaseRepository",
    "AuditLogRepository",
    "PermissionRepository",
    "RoleTemplateRepository",
    "TenantRepository",
    "TenantRoleRepository",
    "UserRepository",
    "UserRoleRepository",
]
