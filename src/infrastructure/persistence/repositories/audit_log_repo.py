from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.persistence.models.audit_log import AuditLog
from src.infrastructure.persistence.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    """Append-only access to audit records."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, AuditLog)

    def add(self, record: AuditLog) -> AuditLog:
        """Stage a record in the caller's transaction without flushing"""
        self.db.add(record)
        return record

    async def get_by_tenant(
        self, tenant_id: str, action: str | None = None, limit: int = 100
    ) -> list[AuditLog]:
        query = select(AuditLog).where(AuditLog.tenant_id == tenant_id)
        if action:
            query = query.where(AuditLog.action == action)
        result = await self.db.execute(query.order_by(AuditLog.created_at.desc()).limit(limit))
        return list(result.scalars().all())
