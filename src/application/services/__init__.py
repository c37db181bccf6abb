"""Application services."""

from src.application.services.assignment_graph_validator import \
    AssignmentGraphValidator
from src.application.services.authorization_service import \
    AuthorizationService
from src.application.services.catalog_seed_service import (CatalogSeedService,
                                                           SeedResult)
from src.application.services.default_role_service import DefaultRoleService
from src.application.services.role_slot_allocator import RoleSlotAllocator
from src.application.services.security_event_service import \
    SecurityEventService
from src.application.services.template_projector import (ProjectedRole,
                                                         TemplateProjector,
                                                         TemplateSetSummary)
from src.application.services.tenant_role_service import (RoleDetail,
                                                          RoleListing,
                                                          RoleView,
                                                          TenantRoleService)
from src.application.services.user_management_service import \
    UserManagementService

__all__ = [
    "AuthorizationService",
    "SecurityEventService",
    "RoleSlotAllocator",
    "TemplateProjector",
    "ProjectedRole",
    "TemplateSetSummary",
    "AssignmentGraphValidator",
    "DefaultRoleService",
    "TenantRoleService",
    "RoleView",
    "RoleDetail",
    "RoleListing",
    "UserManagementService",
    "CatalogSeedService",
    "SeedResult",
]
