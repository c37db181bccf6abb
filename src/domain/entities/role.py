"""
Role and role template domain entities.

Holds the rules that decide whether a tenant role still matches the
template it was projected from, and the definition of the reserved Guest
role that every tenant uses as its default.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime

GUEST_ROLE_ALIAS = "Guest"
GUEST_ROLE_DESCRIPTION = "View-only access to content and features enabled for the tenant."
# Guest sits outside the 1..max_role_slots range and never consumes a slot
GUEST_SLOT_POSITION = 0
GUEST_PERMISSION_NAMES: tuple[str, ...] = (
    "categories.read",
    "quizzes.read",
    "courses.read",
    "rewards.read",
    "games.read",
    "leaderboard.view",
    "points.view",
    "users.read",
    "roles.read",
    "settings.view",
)


def is_guest_alias(name: str | None) -> bool:
    """Guest is matched ignoring case and surrounding whitespace"""
    return bool(name) and name.strip().lower() == GUEST_ROLE_ALIAS.lower()


def is_modified_from_template(
    role_alias: str,
    role_permission_ids: Iterable[str],
    template_role_name: str | None,
    template_permission_ids: Iterable[str] | None,
) -> bool:
    """
    Whether a role has diverged from the template it was created from.

    A role without a template (template_role_name is None) is always
    modified. Otherwise it is modified when the alias differs from the
    template's role name (exact comparison) or when the permission sets are
    not identical. Added and removed permissions both count.
    """
    if template_role_name is None:
        return True
    if role_alias != template_role_name:
        return True
    return set(role_permission_ids) != set(template_permission_ids or ())


@dataclass(frozen=True)
class RoleTemplateEntity:
    """A tenant-independent role blueprint with its permission set"""

    id: str
    template_set_name: str
    role_name: str
    description: str | None
    slot_position: int
    permission_ids: frozenset[str] = field(default_factory=frozenset)
    is_default_set: bool = False

    @property
    def is_reserved(self) -> bool:
        """The Guest template is provisioned separately and never projected"""
        return is_guest_alias(self.role_name)


@dataclass
class TenantRoleEntity:
    """A tenant's concrete role, as read for listing and diffing"""

    id: str
    tenant_id: str
    role_alias: str
    slot_position: int
    permission_ids: frozenset[str] = field(default_factory=frozenset)
    description: str | None = None
    is_active: bool = True
    does_not_count_toward_slot_limit: bool = False
    created_from_template_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def is_modified_from(self, template: RoleTemplateEntity | None) -> bool:
        if template is None or self.created_from_template_id != template.id:
            return True
        return is_modified_from_template(
            self.role_alias, self.permission_ids, template.role_name, template.permission_ids
        )


def compute_modified_flags(
    roles: Iterable[TenantRoleEntity],
    templates_by_id: Mapping[str, RoleTemplateEntity],
) -> dict[str, bool]:
    """
    Modified-from-template flag for every role, keyed by role id.

    Templates are looked up from a preloaded mapping so a whole listing is
    computed without further queries.
    """
    flags: dict[str, bool] = {}
    for role in roles:
        template = (
            templates_by_id.get(role.created_from_template_id)
            if role.created_from_template_id
            else None
        )
        flags[role.id] = role.is_modified_from(template)
    return flags
