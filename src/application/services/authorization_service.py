from sqlalchemy.ext.asyncio import AsyncSession

from src.application.interfaces.services import IPermissionCache
from src.domain.exceptions import PermissionDeniedError
from src.infrastructure.persistence.repositories.permission_repo import \
    PermissionRepository
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class AuthorizationService:
    """
    Centralized permission checking with Redis caching.
    Follow principle: "Check permissions, not roles"

    A user's capabilities in a tenant are the permission names attached to
    the single active role it holds there.
    """

    def __init__(self, db: AsyncSession, cache_service: IPermissionCache | None = None):
        self.permission_repo = PermissionRepository(db)
        self.cache = cache_service

    async def get_user_permissions(self, user_id: str, tenant_id: str) -> set[str]:
        """
        Permission names for a user in a tenant, e.g. {'roles.read', 'users.update'}.

        Served from cache when available, otherwise resolved from the store
        and cached for `cache_ttl_permissions` seconds.
        """
        if self.cache and self.cache.is_available():
            cached = await self.cache.get_user_permissions(tenant_id, user_id)
            if cached is not None:
                return cached

        permissions = await self.permission_repo.get_user_permission_names(user_id, tenant_id)

        if self.cache and self.cache.is_available():
            await self.cache.set_user_permissions(tenant_id, user_id, permissions)

        return permissions

    async def check_permission(self, user_id: str, tenant_id: str, permission: str) -> bool:
        """
        Check if user has a specific permission.

        Examples:
            - check_permission(user_id, tenant_id, "roles.create")
            - check_permission(user_id, tenant_id, "users.update")
        """
        permissions = await self.get_user_permissions(user_id, tenant_id)
        return permission in permissions

    async def require_permission(
        self, user_id: str, tenant_id: str, permission: str, message: str | None = None
    ) -> None:
        """Raise PermissionDeniedError if user lacks permission"""
        if not await self.check_permission(user_id, tenant_id, permission):
            logger.info("User %s denied %s in tenant %s", user_id, permission, tenant_id)
            raise PermissionDeniedError(
                message or f"Permission denied: {permission} required", permission=permission
            )

    async def invalidate_user_cache(self, user_id: str, tenant_id: str) -> None:
        """
        Invalidate cached permissions for a specific user

        Call this when the user's role is assigned, changed or removed.
        """
        if self.cache and self.cache.is_available():
            await self.cache.invalidate_user_permissions(tenant_id, user_id)

    async def invalidate_tenant_cache(self, tenant_id: str) -> None:
        """
        Invalidate all cached permissions for a tenant

        Call this when a role's permission set or active flag changes, or a
        role is deleted.
        """
        if self.cache and self.cache.is_available():
            await self.cache.invalidate_tenant_permissions(tenant_id)
