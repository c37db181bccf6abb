"""Test user endpoints"""

import pytest
from fastapi import status


@pytest.fixture
async def editor_headers(seeded_catalog, test_tenant, test_user, make_role, auth_headers):
    """Caller may edit users but not change their roles"""
    await make_role(
        test_tenant.id,
        "Editor",
        slot_position=1,
        permission_names=("users.read", "users.update"),
        holders=(test_user.id,),
    )
    return auth_headers


@pytest.fixture
async def member(make_user, test_tenant):
    return await make_user("member-1", test_tenant.id, first_name="Ada")


@pytest.mark.asyncio
async def test_get_user(client, editor_headers, member):
    response = await client.get(f"/api/v1/users/{member.id}", headers=editor_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["firstName"] == "Ada"
    assert data["tenantRoleId"] is None


@pytest.mark.asyncio
async def test_get_user_of_other_tenant_is_not_found(client, editor_headers, make_user, other_tenant):
    outsider = await make_user("outsider", other_tenant.id)

    response = await client.get(f"/api/v1/users/{outsider.id}", headers=editor_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_update_profile(client, editor_headers, member):
    response = await client.patch(
        f"/api/v1/users/{member.id}",
        headers=editor_headers,
        json={"lastName": "Lovelace", "email": "ada@example.com"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["firstName"] == "Ada"
    assert data["lastName"] == "Lovelace"
    assert data["email"] == "ada@example.com"


@pytest.mark.asyncio
async def test_set_and_clear_reports_to(client, editor_headers, member, test_user):
    response = await client.patch(
        f"/api/v1/users/{member.id}", headers=editor_headers, json={"reportsToUserId": test_user.id}
    )
    assert response.status_code == 200
    assert response.json()["reportsToUserId"] == test_user.id

    response = await client.patch(
        f"/api/v1/users/{member.id}", headers=editor_headers, json={"reportsToUserId": None}
    )
    assert response.status_code == 200
    assert response.json()["reportsToUserId"] is None


@pytest.mark.asyncio
async def test_self_reporting_rejected(client, editor_headers, member):
    response = await client.patch(
        f"/api/v1/users/{member.id}", headers=editor_headers, json={"reportsToUserId": member.id}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "SELF_REPORTING_NOT_ALLOWED"


@pytest.mark.asyncio
async def test_cyclic_reports_to_rejected(client, editor_headers, make_user, test_tenant):
    boss = await make_user("boss", test_tenant.id)
    await make_user("worker", test_tenant.id, reports_to_user_id=boss.id)

    response = await client.patch(
        f"/api/v1/users/{boss.id}", headers=editor_headers, json={"reportsToUserId": "worker"}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "circular" in response.json()["message"]


@pytest.mark.asyncio
async def test_manager_in_other_tenant_rejected(client, editor_headers, member, make_user, other_tenant):
    outsider = await make_user("outsider", other_tenant.id)

    response = await client.patch(
        f"/api/v1/users/{member.id}", headers=editor_headers, json={"reportsToUserId": outsider.id}
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "CROSS_TENANT_MANAGER_NOT_ALLOWED"


@pytest.mark.asyncio
async def test_role_change_needs_roles_assign(client, editor_headers, member, make_role, test_tenant):
    coach = await make_role(test_tenant.id, "Coach", slot_position=2)

    response = await client.patch(
        f"/api/v1/users/{member.id}", headers=editor_headers, json={"tenantRoleId": coach.id, "firstName": "Eve"}
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN

    # Nothing from the rejected request is kept
    response = await client.get(f"/api/v1/users/{member.id}", headers=editor_headers)
    assert response.json()["firstName"] == "Ada"
    assert response.json()["tenantRoleId"] is None


@pytest.mark.asyncio
async def test_role_change_with_roles_assign(client, seeded_catalog, test_tenant, test_user, member, make_role, auth_headers):
    await make_role(
        test_tenant.id,
        "Admin",
        slot_position=1,
        permission_names=("users.read", "users.update", "roles.assign"),
        holders=(test_user.id,),
    )
    coach = await make_role(test_tenant.id, "Coach", slot_position=2)

    response = await client.patch(
        f"/api/v1/users/{member.id}", headers=auth_headers, json={"tenantRoleId": coach.id}
    )

    assert response.status_code == 200
    assert response.json()["tenantRoleId"] == coach.id


@pytest.mark.asyncio
async def test_update_without_users_update(
    client, seeded_catalog, test_tenant, member, make_user, make_role, make_auth_headers
):
    """A Guest may read users but not edit them"""
    await make_role(test_tenant.id, "Coach", slot_position=1)
    reader = await make_user("reader", test_tenant.id)
    headers = make_auth_headers(reader.id, test_tenant.id)

    assert (await client.get(f"/api/v1/users/{member.id}", headers=headers)).status_code == 200

    response = await client.patch(f"/api/v1/users/{member.id}", headers=headers, json={"lastName": "X"})

    assert response.status_code == status.HTTP_403_FORBIDDEN
