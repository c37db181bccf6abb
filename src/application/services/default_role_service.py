"""
Default role provisioning.

Every tenant carries a built-in, view-only Guest role that sits outside the
slot limit. Members without a role receive the tenant's default role, which
is the Guest role unless an administrator chose another one.
"""

from src.application.interfaces.services import ISecurityEventEmitter
from src.application.services.assignment_graph_validator import (
    SYSTEM_ASSIGNER, AssignmentGraphValidator)
from src.domain.entities.role import (GUEST_PERMISSION_NAMES,
                                      GUEST_ROLE_ALIAS,
                                      GUEST_ROLE_DESCRIPTION,
                                      GUEST_SLOT_POSITION)
from src.domain.exceptions import TenantNotFoundException
from src.infrastructure.persistence.models.permission import UserRole
from src.infrastructure.persistence.models.role import TenantRole
from src.infrastructure.persistence.repositories.permission_repo import \
    PermissionRepository
from src.infrastructure.persistence.repositories.role_repo import \
    TenantRoleRepository
from src.infrastructure.persistence.repositories.tenant_repo import \
    TenantRepository
from src.infrastructure.persistence.repositories.user_role_repo import \
    UserRoleRepository
from src.shared.enums import (ActorType, SecurityEventSeverity,
                              SecurityEventType)
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class DefaultRoleService:
    def __init__(
        self,
        tenant_repo: TenantRepository,
        role_repo: TenantRoleRepository,
        permission_repo: PermissionRepository,
        user_role_repo: UserRoleRepository,
        assignment_validator: AssignmentGraphValidator,
        security_events: ISecurityEventEmitter,
    ) -> None:
        self.tenant_repo = tenant_repo
        self.role_repo = role_repo
        self.permission_repo = permission_repo
        self.user_role_repo = user_role_repo
        self.assignment_validator = assignment_validator
        self.security_events = security_events

    async def ensure_tenant_has_guest_role(self, tenant_id: str) -> str:
        """
        Find or create the tenant's Guest role and return its id.

        Idempotent. Also makes Guest the tenant default when none is set.
        Guest permissions missing from the catalog are skipped.
        """
        tenant = await self.tenant_repo.get_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFoundException(tenant_id)

        guest = await self.role_repo.find_by_alias(tenant_id, GUEST_ROLE_ALIAS)
        if guest is None:
            guest = await self.role_repo.create(
                TenantRole(
                    tenant_id=tenant_id,
                    role_alias=GUEST_ROLE_ALIAS,
                    description=GUEST_ROLE_DESCRIPTION,
                    slot_position=GUEST_SLOT_POSITION,
                    is_active=True,
                    does_not_count_toward_slot_limit=True,
                )
            )
            permissions = await self.permission_repo.get_active_by_names(GUEST_PERMISSION_NAMES)
            await self.role_repo.add_permissions(guest.id, [p.id for p in permissions])
            if len(permissions) < len(GUEST_PERMISSION_NAMES):
                logger.warning(
                    "Guest role for tenant %s created with %d of %d permissions; seed the catalog",
                    tenant_id,
                    len(permissions),
                    len(GUEST_PERMISSION_NAMES),
                )

            await self.security_events.emit(
                SecurityEventType.RBAC_DEFAULT_ROLE_PROVISIONED,
                tenant_id=tenant_id,
                resource="tenant_role",
                resource_id=guest.id,
                actor_type=ActorType.SYSTEM,
                severity=SecurityEventSeverity.LOW,
                details={
                    "roleId": guest.id,
                    "roleAlias": guest.role_alias,
                    "permissionCount": len(permissions),
                },
            )

        if tenant.default_role_id is None:
            await self.tenant_repo.set_default_role(tenant, guest.id)

        return guest.id

    async def get_tenant_default_role_id(self, tenant_id: str) -> str:
        """The configured default role if still active, else the Guest role"""
        tenant = await self.tenant_repo.get_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFoundException(tenant_id)

        if tenant.default_role_id:
            role = await self.role_repo.get_active_by_id_and_tenant(tenant.default_role_id, tenant_id)
            if role is not None:
                return role.id
            logger.warning(
                "Default role %s of tenant %s is missing or inactive; falling back to Guest",
                tenant.default_role_id,
                tenant_id,
            )

        return await self.ensure_tenant_has_guest_role(tenant_id)

    async def ensure_user_has_default_role(self, user_id: str, tenant_id: str) -> UserRole | None:
        """
        Assign the default role to a member that holds none; returns the new assignment.

        Tenants without any role are left alone until initialize_roles
        bootstraps them.
        """
        if await self.user_role_repo.get_for_user(user_id, tenant_id) is not None:
            return None
        if not await self.role_repo.count_by_tenant(tenant_id):
            logger.debug("Tenant %s has no roles yet; skipping default role for %s", tenant_id, user_id)
            return None

        role_id = await self.get_tenant_default_role_id(tenant_id)
        assignment = await self.assignment_validator.assign_role(
            user_id, role_id, tenant_id, assigned_by=SYSTEM_ASSIGNER
        )
        logger.info("Assigned default role %s to user %s in tenant %s", role_id, user_id, tenant_id)
        return assignment
