from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.persistence.models.permission import \
    RoleTemplatePermission
from src.infrastructure.persistence.models.role import RoleTemplate
from src.infrastructure.persistence.repositories.base import BaseRepository


class RoleTemplateRepository(BaseRepository[RoleTemplate]):
    """Repository for shared role templates (not tenant scoped)."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, RoleTemplate)

    async def get_by_set(self, template_set_name: str) -> list[RoleTemplate]:
        """Templates of one set, ordered by intended slot position"""
        result = await self.db.execute(
            select(RoleTemplate)
            .where(RoleTemplate.template_set_name == template_set_name)
            .order_by(RoleTemplate.slot_position)
        )
        return list(result.scalars().all())

    async def get_all_ordered(self) -> list[RoleTemplate]:
        result = await self.db.execute(
            select(RoleTemplate).order_by(RoleTemplate.template_set_name, RoleTemplate.slot_position)
        )
        return list(result.scalars().all())

    async def get_by_ids(self, template_ids: Iterable[str]) -> list[RoleTemplate]:
        ids = list(template_ids)
        if not ids:
            return []
        result = await self.db.execute(select(RoleTemplate).where(RoleTemplate.id.in_(ids)))
        return list(result.scalars().all())

    async def get_by_set_and_name(self, template_set_name: str, role_name: str) -> RoleTemplate | None:
        result = await self.db.execute(
            select(RoleTemplate).where(
                RoleTemplate.template_set_name == template_set_name,
                RoleTemplate.role_name == role_name,
            )
        )
        return result.scalar_one_or_none()

    async def get_permission_ids_by_template(
        self, template_ids: Iterable[str]
    ) -> dict[str, set[str]]:
        """Permission-id sets for many templates in one query"""
        ids = list(template_ids)
        grouped: dict[str, set[str]] = defaultdict(set)
        if not ids:
            return grouped
        result = await self.db.execute(
            select(RoleTemplatePermission.role_template_id, RoleTemplatePermission.permission_id)
            .where(RoleTemplatePermission.role_template_id.in_(ids))
        )
        for template_id, permission_id in result.all():
            grouped[template_id].add(permission_id)
        return grouped

    async def set_permissions(self, template_id: str, permission_ids: Iterable[str]) -> int:
        """Replace the template's permission set (reseeding overwrites it)"""
        await self.db.execute(
            delete(RoleTemplatePermission).where(
                RoleTemplatePermission.role_template_id == template_id
            )
        )
        rows = [
            RoleTemplatePermission(role_template_id=template_id, permission_id=permission_id)
            for permission_id in dict.fromkeys(permission_ids)
        ]
        if rows:
            self.db.add_all(rows)
        await self.db.flush()
        return len(rows)
