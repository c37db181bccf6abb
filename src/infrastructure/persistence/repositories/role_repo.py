from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.persistence.models.permission import (
    Permission, TenantRolePermission)
from src.infrastructure.persistence.models.role import TenantRole
from src.infrastructure.persistence.repositories.base import BaseRepository


class TenantRoleRepository(BaseRepository[TenantRole]):
    """Repository for tenant roles and their permission joins."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, TenantRole)

    async def get_by_tenant(self, tenant_id: str, include_inactive: bool = True) -> list[TenantRole]:
        """All roles of a tenant ordered by slot position"""
        query = select(TenantRole).where(TenantRole.tenant_id == tenant_id)
        if not include_inactive:
            query = query.where(TenantRole.is_active.is_(True))
        result = await self.db.execute(query.order_by(TenantRole.slot_position))
        return list(result.scalars().all())

    async def get_active_by_id_and_tenant(self, role_id: str, tenant_id: str) -> TenantRole | None:
        result = await self.db.execute(
            select(TenantRole).where(
                TenantRole.id == role_id,
                TenantRole.tenant_id == tenant_id,
                TenantRole.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def count_counted_by_tenant(self, tenant_id: str) -> int:
        """Roles that consume a slot (does_not_count_toward_slot_limit is false)"""
        result = await self.db.execute(
            select(func.count())
            .select_from(TenantRole)
            .where(
                TenantRole.tenant_id == tenant_id,
                TenantRole.does_not_count_toward_slot_limit.is_(False),
            )
        )
        return result.scalar_one()

    async def get_used_slot_positions(self, tenant_id: str) -> set[int]:
        result = await self.db.execute(
            select(TenantRole.slot_position).where(TenantRole.tenant_id == tenant_id)
        )
        return set(result.scalars().all())

    async def find_by_alias(
        self, tenant_id: str, role_alias: str, exclude_role_id: str | None = None
    ) -> TenantRole | None:
        """Case-insensitive alias lookup within a tenant"""
        query = select(TenantRole).where(
            TenantRole.tenant_id == tenant_id,
            func.lower(TenantRole.role_alias) == role_alias.strip().lower(),
        )
        if exclude_role_id:
            query = query.where(TenantRole.id != exclude_role_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    # Permission joins

    async def get_permission_ids(self, role_id: str) -> set[str]:
        result = await self.db.execute(
            select(TenantRolePermission.permission_id).where(
                TenantRolePermission.tenant_role_id == role_id
            )
        )
        return set(result.scalars().all())

    async def get_permissions_by_role(self, role_ids: Iterable[str]) -> dict[str, list[Permission]]:
        """Permissions for many roles in one query, keyed by role id"""
        ids = list(role_ids)
        grouped: dict[str, list[Permission]] = defaultdict(list)
        if not ids:
            return grouped
        result = await self.db.execute(
            select(TenantRolePermission.tenant_role_id, Permission)
            .join(Permission, Permission.id == TenantRolePermission.permission_id)
            .where(TenantRolePermission.tenant_role_id.in_(ids))
            .order_by(Permission.category, Permission.name)
        )
        for role_id, permission in result.all():
            grouped[role_id].append(permission)
        return grouped

    async def add_permissions(self, role_id: str, permission_ids: Iterable[str]) -> int:
        rows = [
            TenantRolePermission(tenant_role_id=role_id, permission_id=permission_id)
            for permission_id in dict.fromkeys(permission_ids)
        ]
        if rows:
            self.db.add_all(rows)
            await self.db.flush()
        return len(rows)

    async def replace_permissions(self, role_id: str, permission_ids: Iterable[str]) -> int:
        """Swap the whole permission set; callers run this inside their transaction"""
        await self.db.execute(
            delete(TenantRolePermission).where(TenantRolePermission.tenant_role_id == role_id)
        )
        return await self.add_permissions(role_id, permission_ids)
