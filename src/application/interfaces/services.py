"""
Service interfaces (ports) for the application layer.

These protocols define the contracts the core services rely on, so tests
can hand in doubles and the infrastructure can change underneath.
Following Dependency Inversion Principle (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from src.infrastructure.persistence.models.audit_log import AuditLog
    from src.shared.enums import (ActorType, SecurityEventCategory,
                                  SecurityEventSeverity, SecurityEventType)


class IPermissionCache(Protocol):
    """Protocol for the per-user permission cache (DIP)"""

    def is_available(self) -> bool:
        """Whether the backing store is reachable"""
        ...

    async def get_user_permissions(self, tenant_id: str, user_id: str) -> set[str] | None:
        """Cached permission names, or None on a miss"""
        ...

    async def set_user_permissions(self, tenant_id: str, user_id: str, permissions: set[str]) -> bool:
        ...

    async def invalidate_user_permissions(self, tenant_id: str, user_id: str) -> bool:
        ...

    async def invalidate_tenant_permissions(self, tenant_id: str) -> int:
        ...


class ISecurityEventEmitter(Protocol):
    """Protocol for audit/security event recording (DIP)"""

    async def emit(
        self,
        event_type: SecurityEventType,
        tenant_id: str,
        resource: str,
        details: dict[str, Any],
        resource_id: str | None = None,
        message: str | None = None,
        actor_id: str | None = None,
        actor_type: ActorType | None = None,
        severity: SecurityEventSeverity = ...,
        category: SecurityEventCategory = ...,
    ) -> AuditLog:
        """Stage one audit record in the caller's transaction"""
        ...
