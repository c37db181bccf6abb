"""
Domain exceptions for the RBAC service.

Each exception represents a business rule violation and carries a
machine-readable error code plus a human-readable message that names the
offending value (slot limit, alias, ...) so an administrator can act on it.
These exceptions are independent of infrastructure concerns; the HTTP layer
maps them to status codes.
"""

from typing import Any


class RbacException(Exception):
    """
    Base exception for all RBAC service errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error code for API responses
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(RbacException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        error_code: str = "VALIDATION_ERROR",
        details: dict[str, Any] | None = None,
    ):
        merged = dict(details or {})
        if field:
            merged["field"] = field
        super().__init__(message, error_code, merged)


class AuthenticationException(RbacException):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(RbacException):
    """Raised when user lacks required permissions."""

    def __init__(self, permission: str):
        message = f"Permission denied: {permission} required"
        super().__init__(message, "AUTHORIZATION_ERROR", {"permission": permission})


class PermissionDeniedError(RbacException):
    """Permission denied - actor lacks a capability needed for this specific mutation."""

    def __init__(self, message: str = "Permission denied", permission: str | None = None):
        details: dict[str, Any] = {}
        if permission:
            details["permission"] = permission
        super().__init__(message, "PERMISSION_DENIED", details)


class TenantNotFoundException(RbacException):
    """Raised when tenant is not found."""

    def __init__(self, tenant_id: str):
        super().__init__(
            f"Tenant not found: {tenant_id}",
            "TENANT_NOT_FOUND",
            {"tenant_id": tenant_id},
        )


class ResourceNotFoundException(RbacException):
    """Raised when a requested resource is not found (or belongs to another tenant)."""

    def __init__(self, resource_type: str, resource_id: str, message: str | None = None):
        super().__init__(
            message or f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


# Role slot allocation


class CapacityExceededError(ValidationException):
    def __init__(self, max_role_slots: int):
        super().__init__(
            f"Maximum {max_role_slots} roles reached. Upgrade your plan for more.",
            error_code="CAPACITY_EXCEEDED",
            details={"max_role_slots": max_role_slots},
        )


class DuplicateRoleAliasError(ValidationException):
    def __init__(self, role_alias: str):
        super().__init__(
            f'A role with name "{role_alias}" already exists',
            field="role_alias",
            error_code="DUPLICATE_ROLE_ALIAS",
            details={"role_alias": role_alias},
        )


class SlotPositionUnavailableError(ValidationException):
    def __init__(self, slot_position: int, max_role_slots: int):
        super().__init__(
            f"Slot position {slot_position} is not available "
            f"(must be a free position between 1 and {max_role_slots})",
            field="slot_position",
            error_code="SLOT_POSITION_UNAVAILABLE",
            details={"slot_position": slot_position, "max_role_slots": max_role_slots},
        )


class NoSlotsAvailableError(RbacException):
    """
    Every slot position is taken although the capacity check passed.

    Internal invariant violation, not a user input error.
    """

    def __init__(self, tenant_id: str, max_role_slots: int):
        super().__init__(
            "No free role slot position is available",
            "NO_SLOTS_AVAILABLE",
            {"tenant_id": tenant_id, "max_role_slots": max_role_slots},
        )


class RoleCreationFailedError(RbacException):
    """Role insert failed after all preconditions passed."""

    def __init__(self, message: str = "Failed to create role"):
        super().__init__(message, "ROLE_CREATION_FAILED")


# Template projection


class TemplateSetNotFoundError(ValidationException):
    def __init__(self, template_set_name: str):
        super().__init__(
            f'No templates found for set "{template_set_name}"',
            field="template_set_name",
            error_code="TEMPLATE_SET_NOT_FOUND",
            details={"template_set_name": template_set_name},
        )


class TenantAlreadyHasRolesError(ValidationException):
    def __init__(self, role_count: int):
        super().__init__(
            "Tenant already has roles. Delete existing roles first or add roles individually.",
            error_code="TENANT_ALREADY_HAS_ROLES",
            details={"role_count": role_count},
        )


class RoleInUseError(ValidationException):
    def __init__(self, role_id: str, user_count: int):
        super().__init__(
            f"Cannot delete role with {user_count} user(s). Remove users first.",
            error_code="ROLE_IN_USE",
            details={"role_id": role_id, "user_count": user_count},
        )


# Assignment graph


class RoleNotFoundOrInactiveError(RbacException):
    def __init__(self, tenant_role_id: str):
        super().__init__(
            "Tenant role not found or inactive",
            "ROLE_NOT_FOUND_OR_INACTIVE",
            {"tenant_role_id": tenant_role_id},
        )


class SelfReportingNotAllowedError(ValidationException):
    def __init__(self, user_id: str):
        super().__init__(
            "User cannot report to themselves",
            field="reports_to_user_id",
            error_code="SELF_REPORTING_NOT_ALLOWED",
            details={"user_id": user_id},
        )


class CrossTenantManagerNotAllowedError(ValidationException):
    def __init__(self, manager_id: str):
        super().__init__(
            "Reports-to must be a user in the same organization",
            field="reports_to_user_id",
            error_code="CROSS_TENANT_MANAGER_NOT_ALLOWED",
            details={"reports_to_user_id": manager_id},
        )


class CyclicReportingChainError(ValidationException):
    def __init__(self, user_id: str, manager_id: str):
        super().__init__(
            "This assignment would create a circular reporting chain",
            field="reports_to_user_id",
            error_code="CYCLIC_REPORTING_CHAIN",
            details={"user_id": user_id, "reports_to_user_id": manager_id},
        )
