from typing import Annotated

from fastapi import APIRouter, Depends

from src.application.services.template_projector import TemplateProjector
from src.presentation.api.dependencies import (get_template_projector,
                                               require_permission)
from src.presentation.api.v1.schemas.role import (RoleTemplateResponse,
                                                  RoleTemplateSetResponse)
from src.presentation.api.v1.schemas.token import TokenPayload

router = APIRouter()


@router.get("/tenant/role-templates", response_model=list[RoleTemplateSetResponse])
async def list_role_templates(
    projector: Annotated[TemplateProjector, Depends(get_template_projector)],
    _: Annotated[TokenPayload, Depends(require_permission("roles.read"))],
):
    """Role templates grouped by template set, default set first"""
    template_sets = await projector.list_template_sets()
    return [
        RoleTemplateSetResponse(
            name=template_set.name,
            is_default=template_set.is_default,
            templates=[
                RoleTemplateResponse(
                    id=template.id,
                    role_name=template.role_name,
                    description=template.description,
                    slot_position=template.slot_position,
                    permission_ids=sorted(template.permission_ids),
                    permission_count=len(template.permission_ids),
                )
                for template in template_set.templates
            ],
        )
        for template_set in template_sets
    ]
