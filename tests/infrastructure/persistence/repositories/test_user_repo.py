"""Test user repository reports-to queries"""

import pytest

from src.infrastructure.persistence.repositories.user_repo import \
    UserRepository


@pytest.fixture
async def user_repo(test_db):
    """User repository fixture"""
    return UserRepository(test_db)


@pytest.fixture
async def chain(make_user, test_tenant):
    """u1 -> u2 -> u3 -> u4 (u4 has no manager)"""
    await make_user("u4", test_tenant.id)
    await make_user("u3", test_tenant.id, reports_to_user_id="u4")
    await make_user("u2", test_tenant.id, reports_to_user_id="u3")
    await make_user("u1", test_tenant.id, reports_to_user_id="u2")


@pytest.mark.asyncio
async def test_manager_chain_nearest_first(user_repo, test_tenant, chain):
    result = await user_repo.get_manager_chain("u2", test_tenant.id, max_depth=10)

    assert result == [("u2", "u3"), ("u3", "u4"), ("u4", None)]


@pytest.mark.asyncio
async def test_manager_chain_respects_depth_bound(user_repo, test_tenant, chain):
    result = await user_repo.get_manager_chain("u1", test_tenant.id, max_depth=2)

    assert [row[0] for row in result] == ["u1", "u2"]
    # The last row still points upward; callers treat that as an unfinished walk
    assert result[-1][1] == "u3"


@pytest.mark.asyncio
async def test_manager_chain_stays_in_tenant(user_repo, test_tenant, other_tenant, chain):
    assert await user_repo.get_manager_chain("u1", other_tenant.id, max_depth=10) == []


@pytest.mark.asyncio
async def test_manager_chain_stops_on_stored_loop(user_repo, test_db, make_user, test_tenant):
    """A loop already in the data is bounded by max_depth"""
    await make_user("a", test_tenant.id)
    await make_user("b", test_tenant.id, reports_to_user_id="a")
    user_a = await user_repo.get_by_id("a")
    user_a.reports_to_user_id = "b"
    await test_db.commit()

    result = await user_repo.get_manager_chain("a", test_tenant.id, max_depth=5)

    assert [row[0] for row in result] == ["a", "b", "a", "b", "a"]


@pytest.mark.asyncio
async def test_set_reports_to(user_repo, test_db, make_user, test_tenant):
    await make_user("boss", test_tenant.id)
    worker = await make_user("worker", test_tenant.id)

    updated = await user_repo.set_reports_to(worker, "boss")
    assert updated.reports_to_user_id == "boss"

    cleared = await user_repo.set_reports_to(worker, None)
    assert cleared.reports_to_user_id is None


@pytest.mark.asyncio
async def test_get_by_tenant_orders_by_username(user_repo, make_user, test_tenant, other_tenant):
    await make_user("id-z", test_tenant.id, username="zed")
    await make_user("id-a", test_tenant.id, username="amy")
    await make_user("id-o", other_tenant.id, username="otto")

    users = await user_repo.get_by_tenant(test_tenant.id)

    assert [u.username for u in users] == ["amy", "zed"]
