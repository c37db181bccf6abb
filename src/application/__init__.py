"""
Application layer - Application Business Rules.

This layer contains application-specific business rules, including:
- Interfaces (ports) for infrastructure dependencies
- Application services that orchestrate domain logic
"""

from src.application.interfaces import IPermissionCache, ISecurityEventEmitter
from src.application.services import (AssignmentGraphValidator,
                                      AuthorizationService,
                                      CatalogSeedService, DefaultRoleService,
                                      RoleSlotAllocator, SecurityEventService,
                                      TemplateProjector, TenantRoleService,
                                      UserManagementService)

__all__ = [
    # Interfaces
    "IPermissionCache",
    "ISecurityEventEmitter",
    # Services
    "AuthorizationService",
    "SecurityEventService",
    "RoleSlotAllocator",
    "TemplateProjector",
    "AssignmentGraphValidator",
    "DefaultRoleService",
    "TenantRoleService",
    "UserManagementService",
    "CatalogSeedService",
]
