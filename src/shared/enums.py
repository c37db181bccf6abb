"""
Shared enumerations for the RBAC service.

Values are persisted in audit_log rows, so renaming a member value is a
data migration.
"""

from enum import Enum


class ActorType(str, Enum):
    """Who performed an audited action"""

    USER = "user"
    SYSTEM = "system"
    EXTERNAL = "external"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [actor.value for actor in cls]


class SecurityEventType(str, Enum):
    """Audit/security event types emitted by role and user mutations"""

    RBAC_ROLE_CREATED = "rbac.role_created"
    RBAC_ROLE_UPDATED = "rbac.role_updated"
    RBAC_ROLE_DELETED = "rbac.role_deleted"
    RBAC_ROLE_TEMPLATE_INITIALIZED = "rbac.role_template_initialized"
    RBAC_ROLE_ASSIGNED = "rbac.role_assigned"
    RBAC_ROLE_UNASSIGNED = "rbac.role_unassigned"
    RBAC_DEFAULT_ROLE_PROVISIONED = "rbac.default_role_provisioned"
    USER_REPORTS_TO_CHANGED = "user.reports_to_changed"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [event.value for event in cls]


class SecurityEventCategory(str, Enum):
    RBAC = "rbac"
    USER_MANAGEMENT = "user_management"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [category.value for category in cls]


class SecurityEventSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def values(cls) -> list[str]:
        """Get all valid values"""
        return [severity.value for severity in cls]
