from collections import defaultdict
from typing import Annotated

from fastapi import APIRouter, Depends

from src.infrastructure.persistence.repositories.permission_repo import \
    PermissionRepository
from src.presentation.api.dependencies import DbSession, require_permission
from src.presentation.api.v1.schemas.role import (PermissionCatalogResponse,
                                                  PermissionResponse)
from src.presentation.api.v1.schemas.token import TokenPayload

router = APIRouter()


@router.get("/permissions", response_model=PermissionCatalogResponse)
async def list_permissions(
    db: DbSession,
    _: Annotated[TokenPayload, Depends(require_permission("roles.read"))],
):
    """Active permission catalog, grouped by category"""
    permissions = [
        PermissionResponse.model_validate(p) for p in await PermissionRepository(db).get_active()
    ]
    grouped: dict[str, list[PermissionResponse]] = defaultdict(list)
    for permission in permissions:
        grouped[permission.category].append(permission)

    return PermissionCatalogResponse(
        permissions=permissions, grouped=dict(grouped), total=len(permissions)
    )
