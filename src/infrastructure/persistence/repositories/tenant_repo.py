from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.persistence.models.tenant import Tenant
from src.infrastructure.persistence.repositories.base import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    """Repository for Tenant rows and their role capacity settings."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Tenant)

    async def get_for_update(self, tenant_id: str) -> Tenant | None:
        """
        Load the tenant and lock its row until the transaction ends.

        Role creation takes this lock before checking capacity so concurrent
        creations for one tenant are serialized (no-op on SQLite).
        """
        result = await self.db.execute(
            select(Tenant).where(Tenant.id == tenant_id).with_for_update()
        )
        return result.scalar_one_or_none()

    async def set_default_role(self, tenant: Tenant, role_id: str | None) -> Tenant:
        tenant.default_role_id = role_id
        return await self.update(tenant)
