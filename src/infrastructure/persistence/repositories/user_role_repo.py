from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.persistence.models.permission import UserRole
from src.infrastructure.persistence.repositories.base import BaseRepository


class UserRoleRepository(BaseRepository[UserRole]):
    """Repository for user → tenant role assignments."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, UserRole)

    async def get_for_user(self, user_id: str, tenant_id: str) -> UserRole | None:
        result = await self.db.execute(
            select(UserRole).where(UserRole.user_id == user_id, UserRole.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_by_tenant(self, tenant_id: str) -> list[UserRole]:
        result = await self.db.execute(
            select(UserRole).where(UserRole.tenant_id == tenant_id).order_by(UserRole.assigned_at)
        )
        return list(result.scalars().all())

    async def delete_for_user(self, user_id: str, tenant_id: str) -> int:
        """Remove every assignment of the user in the tenant, returning how many"""
        result = await self.db.execute(
            delete(UserRole).where(UserRole.user_id == user_id, UserRole.tenant_id == tenant_id)
        )
        await self.db.flush()
        return result.rowcount or 0

    async def count_by_role(self, tenant_role_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(UserRole).where(UserRole.tenant_role_id == tenant_role_id)
        )
        return result.scalar_one()

    async def count_by_roles(self, tenant_role_ids: Iterable[str]) -> dict[str, int]:
        ids = list(tenant_role_ids)
        if not ids:
            return {}
        result = await self.db.execute(
            select(UserRole.tenant_role_id, func.count())
            .where(UserRole.tenant_role_id.in_(ids))
            .group_by(UserRole.tenant_role_id)
        )
        return {role_id: count for role_id, count in result.all()}
