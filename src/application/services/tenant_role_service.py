"""
Tenant role management.

Orchestrates the slot allocator, the template projector and default role
provisioning for the role administration endpoints. Every method runs in
the caller's transaction and stages its audit record there too.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.application.interfaces.services import ISecurityEventEmitter
from src.application.services.authorization_service import \
    AuthorizationService
from src.application.services.default_role_service import DefaultRoleService
from src.application.services.role_slot_allocator import (RoleSlotAllocator,
                                                          to_tenant_entity)
from src.application.services.template_projector import (ProjectedRole,
                                                         TemplateProjector)
from src.domain.entities.role import TenantRoleEntity, is_guest_alias
from src.domain.exceptions import (ResourceNotFoundException,
                                   RoleCreationFailedError, RoleInUseError,
                                   TenantNotFoundException,
                                   ValidationException)
from src.domain.value_objects import RoleAlias
from src.infrastructure.config.settings import get_settings
from src.infrastructure.persistence.models.permission import Permission
from src.infrastructure.persistence.models.role import TenantRole
from src.infrastructure.persistence.models.tenant import Tenant
from src.infrastructure.persistence.repositories.permission_repo import \
    PermissionRepository
from src.infrastructure.persistence.repositories.role_repo import \
    TenantRoleRepository
from src.infrastructure.persistence.repositories.role_template_repo import \
    RoleTemplateRepository
from src.infrastructure.persistence.repositories.tenant_repo import \
    TenantRepository
from src.infrastructure.persistence.repositories.user_role_repo import \
    UserRoleRepository
from src.shared.enums import SecurityEventSeverity, SecurityEventType
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class TemplateRef:
    id: str
    template_set_name: str
    role_name: str


@dataclass
class RoleView:
    """A tenant role as returned by the role endpoints"""

    id: str
    role_alias: str
    description: str | None
    slot_position: int
    is_active: bool
    does_not_count_toward_slot_limit: bool
    created_from_template: TemplateRef | None
    modified_from_template: bool
    permissions: list[Permission]
    user_count: int
    created_at: datetime
    updated_at: datetime

    @property
    def permission_count(self) -> int:
        return len(self.permissions)


@dataclass
class RoleDetail(RoleView):
    permissions_by_category: dict[str, list[Permission]] = field(default_factory=dict)


@dataclass
class RoleListing:
    tenant: Tenant
    roles: list[RoleView]
    used_slots: int
    available_slots: int


class TenantRoleService:
    def __init__(
        self,
        tenant_repo: TenantRepository,
        role_repo: TenantRoleRepository,
        template_repo: RoleTemplateRepository,
        permission_repo: PermissionRepository,
        user_role_repo: UserRoleRepository,
        allocator: RoleSlotAllocator,
        projector: TemplateProjector,
        default_roles: DefaultRoleService,
        authz_service: AuthorizationService,
        security_events: ISecurityEventEmitter,
    ) -> None:
        self.tenant_repo = tenant_repo
        self.role_repo = role_repo
        self.template_repo = template_repo
        self.permission_repo = permission_repo
        self.user_role_repo = user_role_repo
        self.allocator = allocator
        self.projector = projector
        self.default_roles = default_roles
        self.authz_service = authz_service
        self.security_events = security_events

    async def _get_tenant(self, tenant_id: str, for_update: bool = False) -> Tenant:
        if for_update:
            tenant = await self.tenant_repo.get_for_update(tenant_id)
        else:
            tenant = await self.tenant_repo.get_by_id(tenant_id)
        if tenant is None:
            raise TenantNotFoundException(tenant_id)
        return tenant

    async def _get_role(self, tenant_id: str, role_id: str) -> TenantRole:
        role = await self.role_repo.get_by_id_and_tenant(role_id, tenant_id)
        if role is None:
            raise ResourceNotFoundException("TenantRole", role_id, "Role not found")
        return role

    async def _validate_permission_ids(self, permission_ids: Iterable[str]) -> list[str]:
        """Every id must name an active permission"""
        wanted = list(dict.fromkeys(permission_ids))
        found = await self.permission_repo.get_active_by_ids(wanted)
        if len(found) != len(wanted):
            raise ValidationException(
                "One or more permission IDs are invalid",
                field="permission_ids",
                details={"invalid_ids": sorted(set(wanted) - {p.id for p in found})},
            )
        return wanted

    async def _build_views(self, roles: list[TenantRole]) -> list[RoleView]:
        role_ids = [role.id for role in roles]
        permissions = await self.role_repo.get_permissions_by_role(role_ids)
        user_counts = await self.user_role_repo.count_by_roles(role_ids)

        entities = [
            TenantRoleEntity(
                id=role.id,
                tenant_id=role.tenant_id,
                role_alias=role.role_alias,
                slot_position=role.slot_position,
                permission_ids=frozenset(p.id for p in permissions.get(role.id, [])),
                created_from_template_id=role.created_from_template_id,
            )
            for role in roles
        ]
        templates = await self.projector.load_templates(
            role.created_from_template_id for role in roles if role.created_from_template_id
        )
        modified = await self.projector.annotate_modified_from_template(entities, templates)

        views = []
        for role in roles:
            template = templates.get(role.created_from_template_id or "")
            views.append(
                RoleView(
                    id=role.id,
                    role_alias=role.role_alias,
                    description=role.description,
                    slot_position=role.slot_position,
                    is_active=role.is_active,
                    does_not_count_toward_slot_limit=role.does_not_count_toward_slot_limit,
                    created_from_template=(
                        TemplateRef(template.id, template.template_set_name, template.role_name)
                        if template
                        else None
                    ),
                    modified_from_template=modified[role.id],
                    permissions=list(permissions.get(role.id, [])),
                    user_count=user_counts.get(role.id, 0),
                    created_at=role.created_at,
                    updated_at=role.updated_at,
                )
            )
        return views

    async def list_roles(self, tenant_id: str) -> RoleListing:
        tenant = await self._get_tenant(tenant_id)
        roles = await self.role_repo.get_by_tenant(tenant_id)
        used = await self.allocator.count_used_slots(tenant_id)
        return RoleListing(
            tenant=tenant,
            roles=await self._build_views(roles),
            used_slots=used,
            available_slots=to_tenant_entity(tenant).available_slots(used),
        )

    async def get_role(self, tenant_id: str, role_id: str) -> RoleDetail:
        role = await self._get_role(tenant_id, role_id)
        view = (await self._build_views([role]))[0]
        by_category: dict[str, list[Permission]] = defaultdict(list)
        for permission in view.permissions:
            by_category[permission.category].append(permission)
        return RoleDetail(**vars(view), permissions_by_category=dict(by_category))

    async def create_role(
        self,
        tenant_id: str,
        actor_id: str,
        role_alias: str,
        description: str | None = None,
        slot_position: int | None = None,
        permission_ids: list[str] | None = None,
        template_id: str | None = None,
    ) -> RoleView:
        """
        Create a single role.

        The tenant row is locked first so the capacity check and the insert
        see the same role set. Permissions come from permission_ids, or from
        the template when that list is empty.
        """
        tenant = await self._get_tenant(tenant_id, for_update=True)
        alias = RoleAlias(role_alias)

        await self.allocator.assert_can_create_role(tenant)
        await self.allocator.assert_unique_alias(tenant_id, alias)
        position = await self.allocator.resolve_slot_position(tenant, slot_position)

        template = None
        if template_id:
            template = await self.template_repo.get_by_id(template_id)
            if template is None:
                raise ResourceNotFoundException("RoleTemplate", template_id, "Template not found")

        if permission_ids:
            resolved_ids = await self._validate_permission_ids(permission_ids)
        elif template is not None:
            template_permissions = await self.template_repo.get_permission_ids_by_template([template.id])
            resolved_ids = sorted(template_permissions.get(template.id, ()))
        else:
            resolved_ids = []

        try:
            role = await self.role_repo.create(
                TenantRole(
                    tenant_id=tenant_id,
                    role_alias=alias.value,
                    description=description,
                    slot_position=position,
                    is_active=True,
                    does_not_count_toward_slot_limit=False,
                    created_from_template_id=template.id if template else None,
                )
            )
            await self.role_repo.add_permissions(role.id, resolved_ids)
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.error("Role creation failed for tenant %s: %s", tenant_id, e, exc_info=True)
            raise RoleCreationFailedError() from e

        await self.security_events.emit(
            SecurityEventType.RBAC_ROLE_CREATED,
            tenant_id=tenant_id,
            resource="tenant_role",
            resource_id=role.id,
            message=f'Role "{role.role_alias}" created',
            actor_id=actor_id,
            details={
                "roleAlias": role.role_alias,
                "slotPosition": role.slot_position,
                "permissionCount": len(resolved_ids),
                "createdFromTemplateId": role.created_from_template_id,
            },
        )
        return (await self._build_views([role]))[0]

    async def initialize_roles(
        self, tenant_id: str, actor_id: str, template_set_name: str | None = None
    ) -> list[ProjectedRole]:
        """Bootstrap the tenant's roles from a template set, then provision Guest"""
        tenant = await self._get_tenant(tenant_id, for_update=True)
        set_name = template_set_name or get_settings().default_template_set

        created = await self.projector.initialize_from_template_set(tenant, set_name)
        await self.default_roles.ensure_tenant_has_guest_role(tenant_id)

        await self.security_events.emit(
            SecurityEventType.RBAC_ROLE_TEMPLATE_INITIALIZED,
            tenant_id=tenant_id,
            resource="tenant",
            resource_id=tenant_id,
            message=f'Initialized {len(created)} roles from template set "{set_name}"',
            actor_id=actor_id,
            details={
                "templateSetName": set_name,
                "createdRoleCount": len(created),
                "roleIds": [projected.role.id for projected in created],
            },
        )
        return created

    async def update_role(
        self, tenant_id: str, role_id: str, changes: Mapping[str, Any], actor_id: str
    ) -> RoleDetail:
        """
        Apply a partial update; keys absent from `changes` are left alone.

        A supplied permission_ids list replaces the whole permission set.
        """
        role = await self._get_role(tenant_id, role_id)
        updated_fields: list[str] = []

        new_alias = changes.get("role_alias")
        if new_alias is not None:
            alias = RoleAlias(new_alias)
            if alias.value != role.role_alias:
                if is_guest_alias(role.role_alias) and not alias.matches(role.role_alias):
                    raise ValidationException(
                        "The Guest role cannot be renamed", field="role_alias"
                    )
                await self.allocator.assert_unique_alias(tenant_id, alias, exclude_role_id=role.id)
                role.role_alias = alias.value
                updated_fields.append("roleAlias")

        if "description" in changes and changes["description"] != role.description:
            role.description = changes["description"]
            updated_fields.append("description")

        if changes.get("is_active") is not None and changes["is_active"] != role.is_active:
            role.is_active = changes["is_active"]
            updated_fields.append("isActive")

        if changes.get("permission_ids") is not None:
            resolved_ids = await self._validate_permission_ids(changes["permission_ids"])
            if set(resolved_ids) != await self.role_repo.get_permission_ids(role.id):
                await self.role_repo.replace_permissions(role.id, resolved_ids)
                updated_fields.append("permissionIds")

        if updated_fields:
            role = await self.role_repo.update(role)
            await self.security_events.emit(
                SecurityEventType.RBAC_ROLE_UPDATED,
                tenant_id=tenant_id,
                resource="tenant_role",
                resource_id=role.id,
                actor_id=actor_id,
                severity=SecurityEventSeverity.MEDIUM,
                details={
                    "roleId": role.id,
                    "roleAlias": role.role_alias,
                    "updatedFields": updated_fields,
                },
            )
            if {"isActive", "permissionIds"} & set(updated_fields):
                await self.authz_service.invalidate_tenant_cache(tenant_id)

        return await self.get_role(tenant_id, role.id)

    async def delete_role(self, tenant_id: str, role_id: str, actor_id: str) -> None:
        role = await self._get_role(tenant_id, role_id)

        user_count = await self.user_role_repo.count_by_role(role.id)
        if user_count > 0:
            raise RoleInUseError(role.id, user_count)

        tenant = await self._get_tenant(tenant_id)
        if tenant.default_role_id == role.id:
            await self.tenant_repo.set_default_role(tenant, None)

        role_alias = role.role_alias
        await self.role_repo.replace_permissions(role.id, [])
        await self.role_repo.delete(role)

        await self.security_events.emit(
            SecurityEventType.RBAC_ROLE_DELETED,
            tenant_id=tenant_id,
            resource="tenant_role",
            resource_id=role_id,
            message=f'Role "{role_alias}" deleted',
            actor_id=actor_id,
            details={"roleId": role_id, "roleAlias": role_alias},
        )
        await self.authz_service.invalidate_tenant_cache(tenant_id)
