"""Domain value objects."""

from src.domain.value_objects.core import PermissionName, RoleAlias

__all__ = [
    "RoleAlias",
    "PermissionName",
]
