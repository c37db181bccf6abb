"""
Core value objects.

Immutable, self-validating wrappers around the strings the RBAC rules
compare: role aliases and permission names.
"""

import re
from dataclasses import dataclass

from src.domain.exceptions import ValidationException

ROLE_ALIAS_MAX_LENGTH = 100
PERMISSION_NAME_PATTERN = re.compile(r"^[a-z][a-z_]*\.[a-z][a-z_]*$")


@dataclass(frozen=True)
class RoleAlias:
    """
    Display name of a tenant role.

    Surrounding whitespace is stripped. Two aliases collide when they are
    equal ignoring case, so "Manager" and "manager" cannot coexist in one
    tenant.
    """

    value: str

    def __post_init__(self):
        stripped = (self.value or "").strip()
        if not stripped:
            raise ValidationException("Role name is required", field="role_alias")
        if len(stripped) > ROLE_ALIAS_MAX_LENGTH:
            raise ValidationException(
                f"Role name must be at most {ROLE_ALIAS_MAX_LENGTH} characters",
                field="role_alias",
            )
        object.__setattr__(self, "value", stripped)

    @property
    def lookup_key(self) -> str:
        """Lower-cased form used for uniqueness checks (matches SQL lower())"""
        return self.value.lower()

    def matches(self, other: "str | RoleAlias") -> bool:
        other_value = other.value if isinstance(other, RoleAlias) else other.strip()
        return self.lookup_key == other_value.lower()

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PermissionName:
    """Permission identifier in `resource.action` form, e.g. `roles.assign`"""

    value: str

    def __post_init__(self):
        if not PERMISSION_NAME_PATTERN.match(self.value or ""):
            raise ValidationException(
                f"Invalid permission name: {self.value!r}", field="permission"
            )

    @property
    def resource(self) -> str:
        return self.value.split(".", 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(".", 1)[1]

    def __str__(self) -> str:
        return self.value
