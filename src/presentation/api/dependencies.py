from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.services.assignment_graph_validator import \
    AssignmentGraphValidator
from src.application.services.authorization_service import \
    AuthorizationService
from src.application.services.default_role_service import DefaultRoleService
from src.application.services.role_slot_allocator import RoleSlotAllocator
from src.application.services.security_event_service import \
    SecurityEventService
from src.application.services.template_projector import TemplateProjector
from src.application.services.tenant_role_service import TenantRoleService
from src.application.services.user_management_service import \
    UserManagementService
from src.infrastructure.cache.redis_cache import CacheService
from src.infrastructure.persistence.database import get_db_transactional
from src.infrastructure.persistence.models.tenant import Tenant
from src.infrastructure.persistence.repositories import (PermissionRepository,
                                                         RoleTemplateRepository,
                                                         TenantRepository,
                                                         TenantRoleRepository,
                                                         UserRepository,
                                                         UserRoleRepository)
from src.infrastructure.security.jwt import verify_token
from src.presentation.api.v1.schemas.token import TokenPayload
from src.shared.context import set_current_user
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

security = HTTPBearer()

# Global service instances (singletons)
_cache_service: CacheService | None = None


# Cache service dependencies (defined early for use in other dependencies)
async def get_cache_service() -> CacheService:
    """
    Cache service dependency (singleton)

    Returns global cache service instance.
    Initialized on app startup in main.py
    """
    global _cache_service
    if _cache_service is None:
        # Unconnected until main.py calls connect(); every lookup is a miss
        _cache_service = CacheService()
    return _cache_service


def set_cache_service(cache_service: CacheService | None):
    """Set global cache service (called on app startup)"""
    global _cache_service
    _cache_service = cache_service


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> TokenPayload:
    """
    Validate JWT token and return authenticated user payload.
    Token must contain 'sub' (user_id) and 'tenant_id' claims.

    The actor is also stored in the request context for audit records.
    """
    try:
        payload = verify_token(credentials.credentials)
        token_data = TokenPayload(**payload)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    set_current_user(
        token_data.sub,
        token_data.tenant_id,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return token_data


async def get_authz_service(
    db: AsyncSession = Depends(get_db_transactional),
    cache: CacheService = Depends(get_cache_service),
) -> AuthorizationService:
    """Get authorization service for manual permission checks with caching"""
    return AuthorizationService(db, cache_service=cache)


def _build_assignment_validator(
    db: AsyncSession, authz_service: AuthorizationService
) -> AssignmentGraphValidator:
    return AssignmentGraphValidator(
        user_repo=UserRepository(db),
        role_repo=TenantRoleRepository(db),
        user_role_repo=UserRoleRepository(db),
        authz_service=authz_service,
        security_events=SecurityEventService(db),
    )


def _build_default_role_service(
    db: AsyncSession, authz_service: AuthorizationService
) -> DefaultRoleService:
    return DefaultRoleService(
        tenant_repo=TenantRepository(db),
        role_repo=TenantRoleRepository(db),
        permission_repo=PermissionRepository(db),
        user_role_repo=UserRoleRepository(db),
        assignment_validator=_build_assignment_validator(db, authz_service),
        security_events=SecurityEventService(db),
    )


async def get_current_tenant(
    user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_transactional),
    authz_service: AuthorizationService = Depends(get_authz_service),
) -> Tenant:
    """
    Get current tenant from authenticated user's token claims.
    Tenant ID is derived from JWT token, preventing header spoofing attacks.

    A member without a role is given the tenant's default role here, in the
    request transaction, before any permission check reads its role.
    """
    tenant = await TenantRepository(db).get_by_id(user.tenant_id)
    if not tenant:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Tenant not found or access denied",
        )

    member = await UserRepository(db).get_by_id_and_tenant(user.sub, tenant.id)
    if not member or not member.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is not an active member of this tenant",
        )

    await _build_default_role_service(db, authz_service).ensure_user_has_default_role(
        user.sub, tenant.id
    )
    return tenant


def require_permission(permission: str):
    """
    Dependency factory for route-level permission checking.

    Usage:
        @router.post("/tenant/roles", dependencies=[Depends(require_permission("roles.create"))])
        async def create_role(...):
            ...
    """

    async def permission_checker(
        user: TokenPayload = Depends(get_current_user),
        tenant: Tenant = Depends(get_current_tenant),
        authz_service: AuthorizationService = Depends(get_authz_service),
    ) -> TokenPayload:
        has_permission = await authz_service.check_permission(
            user_id=user.sub, tenant_id=tenant.id, permission=permission
        )

        if not has_permission:
            logger.info("User %s lacks %s in tenant %s", user.sub, permission, tenant.id)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: {permission} required",
            )

        return user

    return permission_checker


async def get_assignment_validator(
    db: AsyncSession = Depends(get_db_transactional),
    authz_service: AuthorizationService = Depends(get_authz_service),
) -> AssignmentGraphValidator:
    """Assignment graph validator with transaction management"""
    return _build_assignment_validator(db, authz_service)


async def get_tenant_role_service(
    db: AsyncSession = Depends(get_db_transactional),
    authz_service: AuthorizationService = Depends(get_authz_service),
) -> TenantRoleService:
    """Tenant role service with transaction management"""
    role_repo = TenantRoleRepository(db)
    template_repo = RoleTemplateRepository(db)
    return TenantRoleService(
        tenant_repo=TenantRepository(db),
        role_repo=role_repo,
        template_repo=template_repo,
        permission_repo=PermissionRepository(db),
        user_role_repo=UserRoleRepository(db),
        allocator=RoleSlotAllocator(role_repo),
        projector=TemplateProjector(role_repo, template_repo),
        default_roles=_build_default_role_service(db, authz_service),
        authz_service=authz_service,
        security_events=SecurityEventService(db),
    )


async def get_template_projector(
    db: AsyncSession = Depends(get_db_transactional),
) -> TemplateProjector:
    return TemplateProjector(TenantRoleRepository(db), RoleTemplateRepository(db))


async def get_user_management_service(
    db: AsyncSession = Depends(get_db_transactional),
    validator: AssignmentGraphValidator = Depends(get_assignment_validator),
) -> UserManagementService:
    return UserManagementService(UserRepository(db), validator)


# Annotated aliases used by the routers
CurrentUser = Annotated[TokenPayload, Depends(get_current_user)]
CurrentTenant = Annotated[Tenant, Depends(get_current_tenant)]
DbSession = Annotated[AsyncSession, Depends(get_db_transactional)]
