"""Tests for role slot allocation against the store"""

import logging

import pytest

from src.application.services.role_slot_allocator import RoleSlotAllocator
from src.domain.exceptions import (CapacityExceededError,
                                   DuplicateRoleAliasError,
                                   SlotPositionUnavailableError)
from src.infrastructure.persistence.models import TenantRole
from src.infrastructure.persistence.repositories import TenantRoleRepository


@pytest.fixture
def allocator(test_db):
    return RoleSlotAllocator(TenantRoleRepository(test_db))


@pytest.fixture
def add_role(test_db):
    async def _add_role(tenant_id: str, alias: str, position: int, counted: bool = True) -> TenantRole:
        role = TenantRole(
            tenant_id=tenant_id,
            role_alias=alias,
            slot_position=position,
            does_not_count_toward_slot_limit=not counted,
        )
        test_db.add(role)
        await test_db.commit()
        return role

    return _add_role


@pytest.mark.asyncio
async def test_guest_does_not_count_toward_slots(allocator, add_role, test_tenant):
    await add_role(test_tenant.id, "Guest", 0, counted=False)
    await add_role(test_tenant.id, "Manager", 1)

    assert await allocator.count_used_slots(test_tenant.id) == 1


@pytest.mark.asyncio
async def test_next_free_slot_fills_gaps(allocator, add_role, test_tenant):
    await add_role(test_tenant.id, "Administrator", 1)
    await add_role(test_tenant.id, "Team Lead", 3)

    assert await allocator.next_free_slot_position(test_tenant.id, 5) == 2


@pytest.mark.asyncio
async def test_capacity_exceeded_at_limit(allocator, add_role, test_db, test_tenant):
    test_tenant.max_role_slots = 2
    await test_db.commit()
    await add_role(test_tenant.id, "Administrator", 1)
    await add_role(test_tenant.id, "Manager", 2)

    with pytest.raises(CapacityExceededError):
        await allocator.assert_can_create_role(test_tenant)


@pytest.mark.asyncio
async def test_capacity_rejection_is_logged_once(allocator, add_role, test_db, test_tenant, caplog):
    test_tenant.max_role_slots = 1
    await test_db.commit()
    await add_role(test_tenant.id, "Administrator", 1)

    with caplog.at_level(logging.INFO, logger="src.application.services.role_slot_allocator"):
        with pytest.raises(CapacityExceededError):
            await allocator.assert_can_create_role(test_tenant)

    assert [r.getMessage() for r in caplog.records if "role capacity" in r.getMessage()] == [
        f"Tenant {test_tenant.id} at role capacity (1/1)"
    ]


@pytest.mark.asyncio
async def test_capacity_returns_used_count(allocator, add_role, test_tenant):
    await add_role(test_tenant.id, "Administrator", 1)

    assert await allocator.assert_can_create_role(test_tenant) == 1


@pytest.mark.asyncio
async def test_alias_uniqueness_ignores_case(allocator, add_role, test_tenant):
    await add_role(test_tenant.id, "Manager", 1)

    with pytest.raises(DuplicateRoleAliasError) as exc_info:
        await allocator.assert_unique_alias(test_tenant.id, "MANAGER")
    assert '"MANAGER"' in exc_info.value.message


@pytest.mark.asyncio
async def test_alias_uniqueness_excludes_role_being_renamed(allocator, add_role, test_tenant):
    role = await add_role(test_tenant.id, "Manager", 1)

    await allocator.assert_unique_alias(test_tenant.id, "manager", exclude_role_id=role.id)


@pytest.mark.asyncio
async def test_alias_uniqueness_is_per_tenant(allocator, add_role, test_tenant, other_tenant):
    await add_role(other_tenant.id, "Manager", 1)

    await allocator.assert_unique_alias(test_tenant.id, "Manager")


@pytest.mark.asyncio
async def test_explicit_slot_position_taken(allocator, add_role, test_tenant):
    await add_role(test_tenant.id, "Administrator", 1)

    with pytest.raises(SlotPositionUnavailableError):
        await allocator.resolve_slot_position(test_tenant, 1)
    assert await allocator.resolve_slot_position(test_tenant, 4) == 4
    assert await allocator.resolve_slot_position(test_tenant, None) == 2
