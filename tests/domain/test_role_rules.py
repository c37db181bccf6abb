"""Tests for role, tenant capacity and template drift rules"""

import pytest

from src.domain.entities.role import (RoleTemplateEntity, TenantRoleEntity,
                                      compute_modified_flags, is_guest_alias,
                                      is_modified_from_template)
from src.domain.entities.tenant import TenantEntity
from src.domain.exceptions import (CapacityExceededError,
                                   NoSlotsAvailableError,
                                   SlotPositionUnavailableError,
                                   ValidationException)
from src.domain.value_objects import PermissionName, RoleAlias


@pytest.fixture
def template():
    return RoleTemplateEntity(
        id="tpl-manager",
        template_set_name="generic",
        role_name="Manager",
        description="Manages users",
        slot_position=2,
        permission_ids=frozenset({"p-a", "p-b", "p-c"}),
    )


def make_role(template, **overrides) -> TenantRoleEntity:
    fields = {
        "id": "role-1",
        "tenant_id": "tenant-1",
        "role_alias": template.role_name,
        "slot_position": template.slot_position,
        "permission_ids": template.permission_ids,
        "created_from_template_id": template.id,
    }
    fields.update(overrides)
    return TenantRoleEntity(**fields)


def test_fresh_role_is_not_modified(template):
    assert make_role(template).is_modified_from(template) is False


def test_removed_permission_marks_role_modified(template):
    role = make_role(template, permission_ids=frozenset({"p-a", "p-b"}))
    assert role.is_modified_from(template) is True


def test_added_permission_marks_role_modified(template):
    role = make_role(template, permission_ids=frozenset({"p-a", "p-b", "p-c", "p-d"}))
    assert role.is_modified_from(template) is True


def test_renamed_role_is_modified(template):
    role = make_role(template, role_alias="Team Manager")
    assert role.is_modified_from(template) is True


def test_alias_comparison_is_exact(template):
    role = make_role(template, role_alias="manager")
    assert role.is_modified_from(template) is True


def test_role_without_template_is_always_modified(template):
    role = make_role(template, created_from_template_id=None)
    assert role.is_modified_from(None) is True
    assert is_modified_from_template("Manager", {"p-a", "p-b", "p-c"}, None, None) is True


def test_compute_modified_flags_uses_preloaded_templates(template):
    fresh = make_role(template, id="fresh")
    drifted = make_role(template, id="drifted", permission_ids=frozenset({"p-a"}))
    orphan = make_role(template, id="orphan", created_from_template_id="tpl-gone")

    flags = compute_modified_flags([fresh, drifted, orphan], {template.id: template})

    assert flags == {"fresh": False, "drifted": True, "orphan": True}


def test_guest_alias_matching():
    assert is_guest_alias("Guest")
    assert is_guest_alias("  guest ")
    assert not is_guest_alias("Guests")
    assert not is_guest_alias(None)


def test_guest_template_is_reserved(template):
    guest = RoleTemplateEntity(
        id="tpl-guest", template_set_name="generic", role_name="Guest", description=None, slot_position=0
    )
    assert guest.is_reserved
    assert not template.is_reserved


class TestTenantCapacity:
    def test_lowest_free_slot_is_chosen(self):
        tenant = TenantEntity(id="t1", name="Acme", max_role_slots=5)
        assert tenant.next_free_slot_position({1, 3}) == 2

    def test_guest_position_does_not_block_slots(self):
        tenant = TenantEntity(id="t1", name="Acme", max_role_slots=2)
        assert tenant.next_free_slot_position({0, 1}) == 2

    def test_no_free_slot_raises(self):
        tenant = TenantEntity(id="t1", name="Acme", max_role_slots=2)
        with pytest.raises(NoSlotsAvailableError):
            tenant.next_free_slot_position({1, 2})

    def test_capacity_exceeded_names_the_limit(self):
        tenant = TenantEntity(id="t1", name="Acme", max_role_slots=3)
        with pytest.raises(CapacityExceededError) as exc_info:
            tenant.assert_can_create_role(3)
        assert "Maximum 3 roles reached" in exc_info.value.message

    def test_available_slots_never_negative(self):
        tenant = TenantEntity(id="t1", name="Acme", max_role_slots=2)
        assert tenant.available_slots(1) == 1
        assert tenant.available_slots(4) == 0

    @pytest.mark.parametrize("position", [0, 6, 3])
    def test_explicit_slot_must_be_free_and_in_range(self, position):
        tenant = TenantEntity(id="t1", name="Acme", max_role_slots=5)
        with pytest.raises(SlotPositionUnavailableError):
            tenant.assert_slot_position_free(position, {1, 3})


class TestValueObjects:
    def test_role_alias_is_stripped(self):
        assert RoleAlias("  Manager ").value == "Manager"

    def test_role_alias_matches_ignoring_case(self):
        assert RoleAlias("Manager").matches("manager ")
        assert not RoleAlias("Manager").matches("Managers")

    @pytest.mark.parametrize("value", ["", "   ", "x" * 101])
    def test_invalid_role_alias(self, value):
        with pytest.raises(ValidationException):
            RoleAlias(value)

    def test_permission_name_parts(self):
        name = PermissionName("roles.assign")
        assert name.resource == "roles"
        assert name.action == "assign"

    def test_invalid_permission_name(self):
        with pytest.raises(ValidationException):
            PermissionName("roles:assign")
