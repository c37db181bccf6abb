"""Tests for Guest role provisioning and default role assignment"""

import pytest

from src.domain.entities.role import GUEST_PERMISSION_NAMES
from src.domain.exceptions import TenantNotFoundException
from src.infrastructure.persistence.models import TenantRole
from src.infrastructure.persistence.repositories import (TenantRoleRepository,
                                                         UserRoleRepository)


@pytest.mark.asyncio
async def test_guest_role_provisioned_once(default_role_service, test_db, seeded_catalog, test_tenant):
    first = await default_role_service.ensure_tenant_has_guest_role(test_tenant.id)
    second = await default_role_service.ensure_tenant_has_guest_role(test_tenant.id)

    assert first == second
    roles = await TenantRoleRepository(test_db).get_by_tenant(test_tenant.id)
    assert [r.role_alias for r in roles] == ["Guest"]


@pytest.mark.asyncio
async def test_guest_role_does_not_consume_a_slot(default_role_service, test_db, seeded_catalog, test_tenant):
    role_id = await default_role_service.ensure_tenant_has_guest_role(test_tenant.id)

    role_repo = TenantRoleRepository(test_db)
    guest = await role_repo.get_by_id(role_id)
    assert guest.does_not_count_toward_slot_limit is True
    assert guest.slot_position == 0
    assert await role_repo.count_counted_by_tenant(test_tenant.id) == 0


@pytest.mark.asyncio
async def test_guest_role_gets_view_permissions(default_role_service, test_db, seeded_catalog, test_tenant):
    role_id = await default_role_service.ensure_tenant_has_guest_role(test_tenant.id)

    permissions = await TenantRoleRepository(test_db).get_permissions_by_role([role_id])
    assert {p.name for p in permissions[role_id]} == set(GUEST_PERMISSION_NAMES)


@pytest.mark.asyncio
async def test_guest_becomes_tenant_default(default_role_service, seeded_catalog, test_tenant):
    role_id = await default_role_service.ensure_tenant_has_guest_role(test_tenant.id)

    assert test_tenant.default_role_id == role_id


@pytest.mark.asyncio
async def test_configured_default_role_is_kept(default_role_service, test_db, seeded_catalog, test_tenant):
    learner = TenantRole(tenant_id=test_tenant.id, role_alias="Learner", slot_position=1)
    test_db.add(learner)
    await test_db.flush()
    test_tenant.default_role_id = learner.id
    await test_db.commit()

    assert await default_role_service.get_tenant_default_role_id(test_tenant.id) == learner.id


@pytest.mark.asyncio
async def test_inactive_default_role_falls_back_to_guest(
    default_role_service, test_db, seeded_catalog, test_tenant
):
    retired = TenantRole(tenant_id=test_tenant.id, role_alias="Retired", slot_position=1, is_active=False)
    test_db.add(retired)
    await test_db.flush()
    test_tenant.default_role_id = retired.id
    await test_db.commit()

    role_id = await default_role_service.get_tenant_default_role_id(test_tenant.id)

    guest = await TenantRoleRepository(test_db).get_by_id(role_id)
    assert guest.role_alias == "Guest"


@pytest.fixture
async def initialized_tenant(make_role, seeded_catalog, test_tenant):
    await make_role(test_tenant.id, "Coach", slot_position=1)
    return test_tenant


@pytest.mark.asyncio
async def test_new_user_receives_default_role(default_role_service, test_db, initialized_tenant, test_user):
    tenant = initialized_tenant
    assignment = await default_role_service.ensure_user_has_default_role(test_user.id, tenant.id)

    assert assignment is not None
    assert assignment.assigned_by == "system"
    stored = await UserRoleRepository(test_db).get_for_user(test_user.id, tenant.id)
    assert stored.tenant_role_id == tenant.default_role_id


@pytest.mark.asyncio
async def test_existing_assignment_is_left_alone(default_role_service, initialized_tenant, test_user):
    tenant_id = initialized_tenant.id
    await default_role_service.ensure_user_has_default_role(test_user.id, tenant_id)

    assert await default_role_service.ensure_user_has_default_role(test_user.id, tenant_id) is None


@pytest.mark.asyncio
async def test_uninitialized_tenant_gets_no_role(
    default_role_service, test_db, seeded_catalog, test_tenant, test_user
):
    assert await default_role_service.ensure_user_has_default_role(test_user.id, test_tenant.id) is None

    assert await TenantRoleRepository(test_db).get_by_tenant(test_tenant.id) == []
    assert await UserRoleRepository(test_db).get_for_user(test_user.id, test_tenant.id) is None
    assert test_tenant.default_role_id is None


@pytest.mark.asyncio
async def test_unknown_tenant(default_role_service, seeded_catalog):
    with pytest.raises(TenantNotFoundException):
        await default_role_service.ensure_tenant_has_guest_role("missing-tenant")
