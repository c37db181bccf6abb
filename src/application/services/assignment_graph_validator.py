"""
Assignment graph validation.

Maintains the two per-tenant relations over users: the role assignment
(at most one live UserRole per user and tenant) and the reports-to
hierarchy (a forest, never a cycle, never crossing tenants). Every check
runs before the first write.
"""

from src.application.interfaces.services import ISecurityEventEmitter
from src.application.services.authorization_service import \
    AuthorizationService
from src.domain.entities.reporting import (assert_chain_acyclic,
                                           assert_not_self_reporting,
                                           reports_to_changed)
from src.domain.exceptions import (CrossTenantManagerNotAllowedError,
                                   ResourceNotFoundException,
                                   RoleNotFoundOrInactiveError)
from src.infrastructure.persistence.models.permission import UserRole
from src.infrastructure.persistence.models.user import User
from src.infrastructure.persistence.repositories.role_repo import \
    TenantRoleRepository
from src.infrastructure.persistence.repositories.user_repo import \
    UserRepository
from src.infrastructure.persistence.repositories.user_role_repo import \
    UserRoleRepository
from src.shared.enums import (ActorType, SecurityEventCategory,
                              SecurityEventSeverity, SecurityEventType)
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

SYSTEM_ASSIGNER = "system"
ROLE_ASSIGN_PERMISSION = "roles.assign"


class AssignmentGraphValidator:
    def __init__(
        self,
        user_repo: UserRepository,
        role_repo: TenantRoleRepository,
        user_role_repo: UserRoleRepository,
        authz_service: AuthorizationService,
        security_events: ISecurityEventEmitter,
    ) -> None:
        self.user_repo = user_repo
        self.role_repo = role_repo
        self.user_role_repo = user_role_repo
        self.authz_service = authz_service
        self.security_events = security_events

    async def _get_user(self, user_id: str, tenant_id: str) -> User:
        user = await self.user_repo.get_by_id_and_tenant(user_id, tenant_id)
        if user is None:
            raise ResourceNotFoundException("User", user_id, "User not found")
        return user

    async def assign_role(
        self, user_id: str, tenant_role_id: str, tenant_id: str, assigned_by: str
    ) -> UserRole:
        """
        Give a user exactly one role in the tenant.

        Existing assignments are removed and the new one inserted in the
        caller's transaction, so no reader ever sees zero or two roles.
        """
        role = await self.role_repo.get_active_by_id_and_tenant(tenant_role_id, tenant_id)
        if role is None:
            raise RoleNotFoundOrInactiveError(tenant_role_id)
        await self._get_user(user_id, tenant_id)

        previous = await self.user_role_repo.get_for_user(user_id, tenant_id)
        previous_role_id = previous.tenant_role_id if previous else None

        await self.user_role_repo.delete_for_user(user_id, tenant_id)
        assignment = await self.user_role_repo.create(
            UserRole(
                user_id=user_id,
                tenant_id=tenant_id,
                tenant_role_id=role.id,
                assigned_by=assigned_by,
            )
        )

        permission_ids = await self.role_repo.get_permission_ids(role.id)
        is_system = assigned_by == SYSTEM_ASSIGNER
        await self.security_events.emit(
            SecurityEventType.RBAC_ROLE_ASSIGNED,
            tenant_id=tenant_id,
            resource="user_role",
            resource_id=assignment.id,
            message=f'Role "{role.role_alias}" assigned',
            actor_id=None if is_system else assigned_by,
            actor_type=ActorType.SYSTEM if is_system else ActorType.USER,
            details={
                "targetUserId": user_id,
                "tenantRoleId": role.id,
                "roleAlias": role.role_alias,
                "permissionCount": len(permission_ids),
                "previousTenantRoleId": previous_role_id,
            },
        )
        await self.authz_service.invalidate_user_cache(user_id, tenant_id)
        return assignment

    async def unassign_role(self, user_id: str, tenant_id: str, actor_id: str) -> None:
        existing = await self.user_role_repo.get_for_user(user_id, tenant_id)
        if existing is None:
            raise ResourceNotFoundException("UserRole", user_id, "Role assignment not found")

        await self.user_role_repo.delete_for_user(user_id, tenant_id)
        await self.security_events.emit(
            SecurityEventType.RBAC_ROLE_UNASSIGNED,
            tenant_id=tenant_id,
            resource="user_role",
            resource_id=existing.id,
            actor_id=actor_id,
            details={"targetUserId": user_id, "tenantRoleId": existing.tenant_role_id},
        )
        await self.authz_service.invalidate_user_cache(user_id, tenant_id)

    async def set_reports_to(
        self, user_id: str, new_manager_id: str | None, tenant_id: str
    ) -> User:
        """
        Change who a user reports to.

        Checks, in order: self reference, manager outside the tenant, and a
        manager chain that leads back to the user. An audit record is written
        only when the stored value actually changes.
        """
        user = await self._get_user(user_id, tenant_id)
        assert_not_self_reporting(user_id, new_manager_id)

        if new_manager_id is not None:
            manager = await self.user_repo.get_by_id_and_tenant(new_manager_id, tenant_id)
            if manager is None:
                raise CrossTenantManagerNotAllowedError(new_manager_id)

            # No acyclic chain can be longer than the tenant's membership
            max_depth = await self.user_repo.count_by_tenant(tenant_id)
            chain = await self.user_repo.get_manager_chain(new_manager_id, tenant_id, max_depth)
            assert_chain_acyclic(user_id, new_manager_id, chain, max_depth)

        previous = user.reports_to_user_id
        if not reports_to_changed(previous, new_manager_id):
            return user

        user = await self.user_repo.set_reports_to(user, new_manager_id)
        await self.security_events.emit(
            SecurityEventType.USER_REPORTS_TO_CHANGED,
            tenant_id=tenant_id,
            resource="user",
            resource_id=user_id,
            category=SecurityEventCategory.USER_MANAGEMENT,
            severity=SecurityEventSeverity.MEDIUM,
            details={
                "userId": user_id,
                "previousReportsToUserId": previous,
                "newReportsToUserId": new_manager_id,
            },
        )
        logger.info("User %s now reports to %s (tenant %s)", user_id, new_manager_id, tenant_id)
        return user

    async def assert_can_change_role_assignment(self, actor_id: str, tenant_id: str) -> None:
        """Role changes need roles.assign; users.update alone is not enough"""
        await self.authz_service.require_permission(
            actor_id,
            tenant_id,
            ROLE_ASSIGN_PERMISSION,
            message="You do not have permission to change user roles",
        )
