from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.persistence.models.permission import (
    Permission, TenantRolePermission, UserRole)
from src.infrastructure.persistence.models.role import TenantRole
from src.infrastructure.persistence.repositories.base import BaseRepository


class PermissionRepository(BaseRepository[Permission]):
    """Repository for the global permission catalog."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Permission)

    async def get_by_name(self, name: str) -> Permission | None:
        result = await self.db.execute(select(Permission).where(Permission.name == name))
        return result.scalar_one_or_none()

    async def get_active(self) -> list[Permission]:
        result = await self.db.execute(
            select(Permission)
            .where(Permission.is_active.is_(True))
            .order_by(Permission.category, Permission.name)
        )
        return list(result.scalars().all())

    async def get_active_by_ids(self, permission_ids: Iterable[str]) -> list[Permission]:
        ids = list(dict.fromkeys(permission_ids))
        if not ids:
            return []
        result = await self.db.execute(
            select(Permission).where(Permission.id.in_(ids), Permission.is_active.is_(True))
        )
        return list(result.scalars().all())

    async def get_active_by_names(self, names: Iterable[str]) -> list[Permission]:
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []
        result = await self.db.execute(
            select(Permission).where(Permission.name.in_(wanted), Permission.is_active.is_(True))
        )
        return list(result.scalars().all())

    async def get_user_permission_names(self, user_id: str, tenant_id: str) -> set[str]:
        """
        Permission names a user holds in a tenant through its role.

        Inactive roles and inactive permissions grant nothing.
        """
        result = await self.db.execute(
            select(Permission.name)
            .select_from(UserRole)
            .join(TenantRole, TenantRole.id == UserRole.tenant_role_id)
            .join(TenantRolePermission, TenantRolePermission.tenant_role_id == TenantRole.id)
            .join(Permission, Permission.id == TenantRolePermission.permission_id)
            .where(
                UserRole.user_id == user_id,
                UserRole.tenant_id == tenant_id,
                TenantRole.tenant_id == tenant_id,
                TenantRole.is_active.is_(True),
                Permission.is_active.is_(True),
            )
        )
        return set(result.scalars().all())
