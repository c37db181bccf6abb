from sqlalchemy import literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from src.infrastructure.persistence.models.user import User
from src.infrastructure.persistence.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User rows and the reports-to hierarchy."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def get_by_tenant(self, tenant_id: str, skip: int = 0, limit: int = 100) -> list[User]:
        result = await self.db.execute(
            select(User)
            .where(User.tenant_id == tenant_id)
            .order_by(User.username)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_manager_chain(
        self, manager_id: str, tenant_id: str, max_depth: int
    ) -> list[tuple[str, str | None]]:
        """
        The manager and every manager above it, nearest first.

        Loaded with one recursive query instead of one round-trip per hop.
        The walk stays inside the tenant and stops after max_depth rows, so
        a loop already present in stored data cannot make it run forever.
        """
        chain = (
            select(User.id, User.reports_to_user_id, literal_column("1").label("depth"))
            .where(User.id == manager_id, User.tenant_id == tenant_id)
            .cte("manager_chain", recursive=True)
        )
        chain_alias = chain.alias()
        parent = aliased(User)
        chain = chain.union_all(
            select(parent.id, parent.reports_to_user_id, (chain_alias.c.depth + 1).label("depth"))
            .where(
                parent.id == chain_alias.c.reports_to_user_id,
                parent.tenant_id == tenant_id,
                chain_alias.c.depth < max_depth,
            )
        )
        result = await self.db.execute(
            select(chain.c.id, chain.c.reports_to_user_id).order_by(chain.c.depth)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def set_reports_to(self, user: User, manager_id: str | None) -> User:
        user.reports_to_user_id = manager_id
        return await self.update(user)
