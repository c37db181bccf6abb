"""Domain entities."""

from src.domain.entities.reporting import (assert_chain_acyclic,
                                           assert_not_self_reporting,
                                           reports_to_changed)
from src.domain.entities.role import (GUEST_PERMISSION_NAMES,
                                      GUEST_ROLE_ALIAS,
                                      GUEST_ROLE_DESCRIPTION,
                                      GUEST_SLOT_POSITION,
                                      RoleTemplateEntity, TenantRoleEntity,
                                      compute_modified_flags, is_guest_alias,
                                      is_modified_from_template)
from src.domain.entities.tenant import TenantEntity

__all__ = [
    "TenantEntity",
    "TenantRoleEntity",
    "RoleTemplateEntity",
    "GUEST_ROLE_ALIAS",
    "GUEST_ROLE_DESCRIPTION",
    "GUEST_SLOT_POSITION",
    "GUEST_PERMISSION_NAMES",
    "is_guest_alias",
    "is_modified_from_template",
    "compute_modified_flags",
    "assert_not_self_reporting",
    "assert_chain_acyclic",
    "reports_to_changed",
]
