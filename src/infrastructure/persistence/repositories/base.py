from abc import ABC
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import object_session

from src.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(ABC, Generic[ModelType]):
    """
    Base repository implementing common CRUD operations.

    Repositories never commit: the session's transaction belongs to the
    caller (one per request), so multi-step writes stay atomic.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: str) -> ModelType | None:
        """Get a single record by ID"""
        # Cast to Any for SQLAlchemy dynamic attribute access (id comes from CuidMixin)
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == id))
        return result.scalar_one_or_none()

    async def get_by_id_and_tenant(self, id: str, tenant_id: str) -> ModelType | None:
        """Get a record only if it belongs to the tenant (other tenants' rows look missing)"""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model).where(model.id == id, model.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def count_by_tenant(self, tenant_id: str) -> int:
        model: Any = self.model
        result = await self.db.execute(
            select(func.count()).select_from(self.model).where(model.tenant_id == tenant_id)
        )
        return result.scalar_one()

    async def create(self, obj: ModelType) -> ModelType:
        """Insert a record and load server-side defaults"""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def update(self, obj: ModelType) -> ModelType:
        """
        Flush pending changes of an existing record.

        Handles potentially detached objects by merging back to session.
        """
        if object_session(obj) is None:
            obj = await self.db.merge(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def delete(self, obj: ModelType) -> None:
        await self.db.delete(obj)
        await self.db.flush()
