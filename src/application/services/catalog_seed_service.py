"""
Catalog seeding service.

Upserts the global permission catalog and the shared role templates. Safe
to run repeatedly: permissions are matched by name, templates by
(template_set_name, role_name), and template permission sets are
overwritten with the catalog's.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from src.application.services.rbac_catalog import (PERMISSIONS,
                                                   ROLE_TEMPLATES,
                                                   PermissionData,
                                                   RoleTemplateData)
from src.infrastructure.persistence.models.permission import Permission
from src.infrastructure.persistence.models.role import RoleTemplate
from src.infrastructure.persistence.repositories.permission_repo import \
    PermissionRepository
from src.infrastructure.persistence.repositories.role_template_repo import \
    RoleTemplateRepository
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SeedResult:
    permissions_created: int = 0
    permissions_updated: int = 0
    templates_created: int = 0
    templates_updated: int = 0
    template_permission_links: int = 0


class CatalogSeedService:
    def __init__(
        self,
        permission_repo: PermissionRepository,
        template_repo: RoleTemplateRepository,
        permissions: Sequence[PermissionData] = PERMISSIONS,
        templates: Sequence[RoleTemplateData] = ROLE_TEMPLATES,
    ) -> None:
        self.permission_repo = permission_repo
        self.template_repo = template_repo
        self.permissions = permissions
        self.templates = templates

    async def seed_permissions(self, result: SeedResult) -> dict[str, str]:
        """Upsert every catalog permission; returns name -> id"""
        permission_map: dict[str, str] = {}
        for data in self.permissions:
            permission = await self.permission_repo.get_by_name(data["name"])
            if permission is None:
                permission = await self.permission_repo.create(
                    Permission(
                        name=data["name"],
                        display_name=data["display_name"],
                        category=data["category"].value,
                        description=data["description"],
                        is_active=True,
                    )
                )
                result.permissions_created += 1
            else:
                permission.display_name = data["display_name"]
                permission.category = data["category"].value
                permission.description = data["description"]
                permission.is_active = True
                permission = await self.permission_repo.update(permission)
                result.permissions_updated += 1
            permission_map[permission.name] = permission.id
        return permission_map

    async def seed_templates(self, permission_map: dict[str, str], result: SeedResult) -> None:
        for data in self.templates:
            template = await self.template_repo.get_by_set_and_name(
                data["template_set_name"], data["role_name"]
            )
            if template is None:
                template = await self.template_repo.create(
                    RoleTemplate(
                        template_set_name=data["template_set_name"],
                        role_name=data["role_name"],
                        description=data["description"],
                        slot_position=data["slot_position"],
                        is_default_set=data["is_default_set"],
                    )
                )
                result.templates_created += 1
            else:
                template.description = data["description"]
                template.slot_position = data["slot_position"]
                template.is_default_set = data["is_default_set"]
                template = await self.template_repo.update(template)
                result.templates_updated += 1

            missing = [name for name in data["permissions"] if name not in permission_map]
            for name in missing:
                logger.warning(
                    "Permission %s not found for template %s/%s",
                    name,
                    data["template_set_name"],
                    data["role_name"],
                )
            result.template_permission_links += await self.template_repo.set_permissions(
                template.id, [permission_map[name] for name in data["permissions"] if name in permission_map]
            )

    async def seed(self) -> SeedResult:
        """Seed permissions first, then templates that reference them"""
        result = SeedResult()
        permission_map = await self.seed_permissions(result)
        await self.seed_templates(permission_map, result)
        logger.info(
            "Catalog seeded: %d permissions (%d new), %d templates (%d new), %d template links",
            len(permission_map),
            result.permissions_created,
            result.templates_created + result.templates_updated,
            result.templates_created,
            result.template_permission_links,
        )
        return result
