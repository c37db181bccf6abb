"""
Domain layer - Enterprise Business Rules.

This is the innermost layer containing business entities, value objects,
and domain exceptions. It has no dependencies on other layers.
"""

from src.domain.entities import (RoleTemplateEntity, TenantEntity,
                                 TenantRoleEntity)
from src.domain.enums import PermissionCategory
from src.domain.exceptions import (AuthenticationException,
                                   AuthorizationException,
                                   CapacityExceededError,
                                   CrossTenantManagerNotAllowedError,
                                   CyclicReportingChainError,
                                   DuplicateRoleAliasError,
                                   NoSlotsAvailableError,
                                   PermissionDeniedError, RbacException,
                                   ResourceNotFoundException,
                                   RoleNotFoundOrInactiveError,
                                   SelfReportingNotAllowedError,
                                   TemplateSetNotFoundError,
                                   TenantAlreadyHasRolesError,
                                   TenantNotFoundException,
                                   ValidationException)
from src.domain.value_objects import PermissionName, RoleAlias

__all__ = [
    # Entities
    "TenantEntity",
    "TenantRoleEntity",
    "RoleTemplateEntity",
    # Value Objects
    "RoleAlias",
    "PermissionName",
    # Enums
    "PermissionCategory",
    # Exceptions
    "RbacException",
    "ValidationException",
    "AuthenticationException",
    "AuthorizationException",
    "PermissionDeniedError",
    "TenantNotFoundException",
    "ResourceNotFoundException",
    "CapacityExceededError",
    "DuplicateRoleAliasError",
    "NoSlotsAvailableError",
    "TemplateSetNotFoundError",
    "TenantAlreadyHasRolesError",
    "RoleNotFoundOrInactiveError",
    "SelfReportingNotAllowedError",
    "CrossTenantManagerNotAllowedError",
    "CyclicReportingChainError",
]
