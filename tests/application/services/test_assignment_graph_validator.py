"""Tests for role assignment and reports-to validation"""

import pytest
from sqlalchemy import select

from src.domain.exceptions import (CrossTenantManagerNotAllowedError,
                                   CyclicReportingChainError,
                                   PermissionDeniedError,
                                   ResourceNotFoundException,
                                   RoleNotFoundOrInactiveError,
                                   SelfReportingNotAllowedError)
from src.infrastructure.persistence.models import (AuditLog, Permission,
                                                   TenantRole,
                                                   TenantRolePermission,
                                                   UserRole)
from src.shared.enums import ActorType, SecurityEventType


@pytest.fixture
def add_role(test_db):
    async def _add_role(tenant_id: str, alias: str, position: int, is_active: bool = True) -> TenantRole:
        role = TenantRole(tenant_id=tenant_id, role_alias=alias, slot_position=position, is_active=is_active)
        test_db.add(role)
        await test_db.commit()
        return role

    return _add_role


@pytest.fixture
async def chain_users(make_user, test_tenant):
    """A reports to B reports to C"""
    c = await make_user("user-c", test_tenant.id)
    b = await make_user("user-b", test_tenant.id, reports_to_user_id=c.id)
    a = await make_user("user-a", test_tenant.id, reports_to_user_id=b.id)
    return a, b, c


async def assignments_for(test_db, user_id: str, tenant_id: str) -> list[UserRole]:
    result = await test_db.execute(
        select(UserRole).where(UserRole.user_id == user_id, UserRole.tenant_id == tenant_id)
    )
    return list(result.scalars().all())


async def audit_actions(test_db, tenant_id: str) -> list[str]:
    await test_db.flush()
    result = await test_db.execute(
        select(AuditLog.action).where(AuditLog.tenant_id == tenant_id).order_by(AuditLog.created_at)
    )
    return list(result.scalars().all())


class TestAssignRole:
    @pytest.mark.asyncio
    async def test_second_assignment_replaces_first(
        self, assignment_validator, add_role, test_db, test_tenant, test_user
    ):
        first = await add_role(test_tenant.id, "Manager", 1)
        second = await add_role(test_tenant.id, "Learner", 2)

        await assignment_validator.assign_role(test_user.id, first.id, test_tenant.id, assigned_by="admin")
        await assignment_validator.assign_role(test_user.id, second.id, test_tenant.id, assigned_by="admin")

        rows = await assignments_for(test_db, test_user.id, test_tenant.id)
        assert len(rows) == 1
        assert rows[0].tenant_role_id == second.id

    @pytest.mark.asyncio
    async def test_inactive_role_rejected(self, assignment_validator, add_role, test_tenant, test_user):
        role = await add_role(test_tenant.id, "Retired", 1, is_active=False)

        with pytest.raises(RoleNotFoundOrInactiveError):
            await assignment_validator.assign_role(test_user.id, role.id, test_tenant.id, assigned_by="admin")

    @pytest.mark.asyncio
    async def test_role_of_other_tenant_rejected(
        self, assignment_validator, add_role, test_tenant, other_tenant, test_user
    ):
        foreign = await add_role(other_tenant.id, "Manager", 1)

        with pytest.raises(RoleNotFoundOrInactiveError):
            await assignment_validator.assign_role(test_user.id, foreign.id, test_tenant.id, assigned_by="admin")

    @pytest.mark.asyncio
    async def test_user_of_other_tenant_rejected(
        self, assignment_validator, add_role, make_user, test_tenant, other_tenant
    ):
        role = await add_role(test_tenant.id, "Manager", 1)
        outsider = await make_user("outsider", other_tenant.id)

        with pytest.raises(ResourceNotFoundException):
            await assignment_validator.assign_role(outsider.id, role.id, test_tenant.id, assigned_by="admin")

    @pytest.mark.asyncio
    async def test_assignment_is_audited(self, assignment_validator, add_role, test_db, test_tenant, test_user):
        role = await add_role(test_tenant.id, "Manager", 1)

        await assignment_validator.assign_role(test_user.id, role.id, test_tenant.id, assigned_by="system")

        await test_db.flush()
        result = await test_db.execute(select(AuditLog).where(AuditLog.tenant_id == test_tenant.id))
        record = result.scalar_one()
        assert record.action == SecurityEventType.RBAC_ROLE_ASSIGNED.value
        assert record.actor_type == ActorType.SYSTEM.value
        assert record.details["targetUserId"] == test_user.id
        assert record.details["tenantRoleId"] == role.id
        assert record.details["permissionCount"] == 0

    @pytest.mark.asyncio
    async def test_unassign_removes_assignment(
        self, assignment_validator, add_role, test_db, test_tenant, test_user
    ):
        role = await add_role(test_tenant.id, "Manager", 1)
        await assignment_validator.assign_role(test_user.id, role.id, test_tenant.id, assigned_by="admin")

        await assignment_validator.unassign_role(test_user.id, test_tenant.id, actor_id="admin")

        assert await assignments_for(test_db, test_user.id, test_tenant.id) == []
        with pytest.raises(ResourceNotFoundException):
            await assignment_validator.unassign_role(test_user.id, test_tenant.id, actor_id="admin")


class TestReportsTo:
    @pytest.mark.asyncio
    async def test_self_reporting_rejected(self, assignment_validator, test_tenant, test_user):
        with pytest.raises(SelfReportingNotAllowedError):
            await assignment_validator.set_reports_to(test_user.id, test_user.id, test_tenant.id)

    @pytest.mark.asyncio
    async def test_cross_tenant_manager_rejected(
        self, assignment_validator, make_user, test_tenant, other_tenant, test_user
    ):
        manager = await make_user("foreign-manager", other_tenant.id)

        with pytest.raises(CrossTenantManagerNotAllowedError):
            await assignment_validator.set_reports_to(test_user.id, manager.id, test_tenant.id)

    @pytest.mark.asyncio
    async def test_cycle_rejected_and_chain_unchanged(self, assignment_validator, test_db, chain_users, test_tenant):
        a, b, c = chain_users

        with pytest.raises(CyclicReportingChainError) as exc_info:
            await assignment_validator.set_reports_to(c.id, a.id, test_tenant.id)

        assert "circular" in exc_info.value.message
        assert (a.reports_to_user_id, b.reports_to_user_id, c.reports_to_user_id) == (b.id, c.id, None)
        assert await audit_actions(test_db, test_tenant.id) == []

    @pytest.mark.asyncio
    async def test_valid_manager_change_is_audited(self, assignment_validator, test_db, chain_users, test_tenant):
        a, b, c = chain_users

        user = await assignment_validator.set_reports_to(a.id, c.id, test_tenant.id)

        assert user.reports_to_user_id == c.id
        assert await audit_actions(test_db, test_tenant.id) == [
            SecurityEventType.USER_REPORTS_TO_CHANGED.value
        ]

    @pytest.mark.asyncio
    async def test_unchanged_manager_writes_no_audit(
        self, assignment_validator, test_db, chain_users, test_tenant
    ):
        a, b, _ = chain_users

        await assignment_validator.set_reports_to(a.id, b.id, test_tenant.id)

        assert await audit_actions(test_db, test_tenant.id) == []

    @pytest.mark.asyncio
    async def test_clearing_manager(self, assignment_validator, chain_users, test_tenant):
        a, _, _ = chain_users

        user = await assignment_validator.set_reports_to(a.id, None, test_tenant.id)

        assert user.reports_to_user_id is None


class TestRoleChangeCapability:
    @pytest.mark.asyncio
    async def test_requires_roles_assign(self, assignment_validator, add_role, test_db, test_tenant, test_user):
        role = await add_role(test_tenant.id, "Editor", 1)
        users_update = Permission(name="users.update", display_name="Edit Users", category="user_management")
        test_db.add(users_update)
        await test_db.flush()
        test_db.add(TenantRolePermission(tenant_role_id=role.id, permission_id=users_update.id))
        test_db.add(UserRole(user_id=test_user.id, tenant_id=test_tenant.id, tenant_role_id=role.id))
        await test_db.commit()

        with pytest.raises(PermissionDeniedError) as exc_info:
            await assignment_validator.assert_can_change_role_assignment(test_user.id, test_tenant.id)

        assert exc_info.value.message == "You do not have permission to change user roles"
