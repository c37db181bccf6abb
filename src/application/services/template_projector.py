"""
Template projection service.

Materializes tenant roles from shared role templates and reports whether a
tenant role has since drifted from the template it came from. Drift is
computed on read, never stored.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from src.application.services.role_slot_allocator import to_tenant_entity
from src.domain.entities.role import (RoleTemplateEntity, TenantRoleEntity,
                                      compute_modified_flags)
from src.domain.exceptions import (TemplateSetNotFoundError,
                                   TenantAlreadyHasRolesError)
from src.infrastructure.persistence.models.role import RoleTemplate, TenantRole
from src.infrastructure.persistence.models.tenant import Tenant
from src.infrastructure.persistence.repositories.role_repo import \
    TenantRoleRepository
from src.infrastructure.persistence.repositories.role_template_repo import \
    RoleTemplateRepository
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def to_template_entity(template: RoleTemplate, permission_ids: Iterable[str]) -> RoleTemplateEntity:
    return RoleTemplateEntity(
        id=template.id,
        template_set_name=template.template_set_name,
        role_name=template.role_name,
        description=template.description,
        slot_position=template.slot_position,
        permission_ids=frozenset(permission_ids),
        is_default_set=template.is_default_set,
    )


@dataclass
class ProjectedRole:
    """A tenant role created from a template, with the permission ids it received"""

    role: TenantRole
    permission_ids: frozenset[str]

    @property
    def permission_count(self) -> int:
        return len(self.permission_ids)


@dataclass
class TemplateSetSummary:
    name: str
    is_default: bool
    templates: list[RoleTemplateEntity] = field(default_factory=list)


class TemplateProjector:
    def __init__(self, role_repo: TenantRoleRepository, template_repo: RoleTemplateRepository):
        self.role_repo = role_repo
        self.template_repo = template_repo

    async def list_template_set(self, template_set_name: str) -> list[RoleTemplateEntity]:
        """
        Templates of a set ordered by slot position, permission ids preloaded.

        An unknown set yields an empty list; callers decide whether that is
        an error.
        """
        templates = await self.template_repo.get_by_set(template_set_name)
        permission_ids = await self.template_repo.get_permission_ids_by_template(
            [template.id for template in templates]
        )
        return [to_template_entity(t, permission_ids.get(t.id, ())) for t in templates]

    async def list_template_sets(self) -> list[TemplateSetSummary]:
        """Every template grouped by set name, default set first"""
        templates = await self.template_repo.get_all_ordered()
        permission_ids = await self.template_repo.get_permission_ids_by_template(
            [template.id for template in templates]
        )

        grouped: dict[str, TemplateSetSummary] = {}
        for template in templates:
            summary = grouped.setdefault(
                template.template_set_name,
                TemplateSetSummary(name=template.template_set_name, is_default=False),
            )
            summary.is_default = summary.is_default or template.is_default_set
            summary.templates.append(to_template_entity(template, permission_ids.get(template.id, ())))

        return sorted(grouped.values(), key=lambda s: (not s.is_default, s.name))

    async def instantiate_role(
        self, tenant: Tenant, template: RoleTemplateEntity
    ) -> ProjectedRole | None:
        """
        Create one tenant role as a verbatim copy of a template.

        Returns None without creating anything when the template's slot lies
        beyond the tenant's plan or the template is the reserved Guest role.
        """
        if template.is_reserved:
            logger.debug("Skipping reserved template %s for tenant %s", template.role_name, tenant.id)
            return None
        if not to_tenant_entity(tenant).accepts_template_slot(template.slot_position):
            logger.debug(
                "Skipping template %s (slot %d > max %d) for tenant %s",
                template.role_name,
                template.slot_position,
                tenant.max_role_slots,
                tenant.id,
            )
            return None

        role = await self.role_repo.create(
            TenantRole(
                tenant_id=tenant.id,
                role_alias=template.role_name,
                description=template.description,
                slot_position=template.slot_position,
                is_active=True,
                does_not_count_toward_slot_limit=False,
                created_from_template_id=template.id,
            )
        )
        await self.role_repo.add_permissions(role.id, sorted(template.permission_ids))
        return ProjectedRole(role=role, permission_ids=template.permission_ids)

    async def initialize_from_template_set(
        self, tenant: Tenant, template_set_name: str
    ) -> list[ProjectedRole]:
        """
        Bootstrap a tenant that has no roles from a whole template set.

        Runs in the caller's transaction: if any insert fails the caller's
        rollback removes every role created here. Any existing role, Guest
        included, makes this a merge, which is refused.
        """
        existing = await self.role_repo.count_by_tenant(tenant.id)
        if existing:
            raise TenantAlreadyHasRolesError(existing)

        templates = await self.list_template_set(template_set_name)
        if not templates:
            raise TemplateSetNotFoundError(template_set_name)

        created: list[ProjectedRole] = []
        for template in templates:
            projected = await self.instantiate_role(tenant, template)
            if projected is not None:
                created.append(projected)

        logger.info(
            "Initialized %d roles from template set %s for tenant %s",
            len(created),
            template_set_name,
            tenant.id,
        )
        return created

    async def load_templates(self, template_ids: Iterable[str]) -> dict[str, RoleTemplateEntity]:
        """Templates by id with their permission sets, in two queries"""
        template_ids = set(template_ids)
        templates = await self.template_repo.get_by_ids(template_ids)
        permission_ids: dict[str, set[str]] = defaultdict(set)
        permission_ids.update(await self.template_repo.get_permission_ids_by_template(template_ids))
        return {
            template.id: to_template_entity(template, permission_ids[template.id])
            for template in templates
        }

    async def annotate_modified_from_template(
        self,
        roles: list[TenantRoleEntity],
        templates_by_id: Mapping[str, RoleTemplateEntity] | None = None,
    ) -> dict[str, bool]:
        """
        Modified flag for a whole role listing.

        Compares in memory against templates_by_id; when not given, every
        referenced template is loaded first.
        """
        if templates_by_id is None:
            templates_by_id = await self.load_templates(
                role.created_from_template_id for role in roles if role.created_from_template_id
            )
        return compute_modified_flags(roles, templates_by_id)
