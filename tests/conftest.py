"""Shared test fixtures for pytest"""
import os

# Settings are read at import time; configure before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("REDIS_ENABLED", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlalchemy.pool import NullPool

from main import app
from src.application.services.assignment_graph_validator import \
    AssignmentGraphValidator
from src.application.services.authorization_service import \
    AuthorizationService
from src.application.services.catalog_seed_service import CatalogSeedService
from src.application.services.default_role_service import DefaultRoleService
from src.application.services.role_slot_allocator import RoleSlotAllocator
from src.application.services.security_event_service import \
    SecurityEventService
from src.application.services.template_projector import TemplateProjector
from src.application.services.tenant_role_service import TenantRoleService
from src.infrastructure.persistence.database import (Base, get_db,
                                                     get_db_transactional)
from src.infrastructure.persistence.models import (Permission, Tenant,
                                                  TenantRole,
                                                  TenantRolePermission, User,
                                                  UserRole)
from src.infrastructure.persistence.repositories import (PermissionRepository,
                                                         RoleTemplateRepository,
                                                         TenantRepository,
                                                         TenantRoleRepository,
                                                         UserRepository,
                                                         UserRoleRepository)
from src.infrastructure.security.jwt import create_access_token
from src.presentation.api.dependencies import set_cache_service


@pytest.fixture
async def test_engine(tmp_path):
    """Per-test database; a SQLite file unless TEST_DATABASE_URL is set"""
    database_url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'rbac_test.db'}"
    engine = create_async_engine(database_url, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def test_db(session_factory):
    """Create test database session"""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    """HTTP client for API testing; each request gets its own transaction"""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_db_transactional():
        async with session_factory() as session:
            async with session.begin():
                yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_transactional] = override_get_db_transactional
    set_cache_service(None)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    set_cache_service(None)


@pytest.fixture
async def seeded_catalog(test_db):
    """Permission catalog and role templates, committed"""
    result = await CatalogSeedService(
        PermissionRepository(test_db), RoleTemplateRepository(test_db)
    ).seed()
    await test_db.commit()
    return result


@pytest.fixture
async def test_tenant(test_db):
    """Create test tenant"""
    tenant = Tenant(id="test-tenant-id", name="Test Tenant", max_role_slots=5)
    test_db.add(tenant)
    await test_db.commit()
    await test_db.refresh(tenant)
    return tenant


@pytest.fixture
async def other_tenant(test_db):
    """Create second tenant for isolation tests"""
    tenant = Tenant(id="tenant-2", name="Second Tenant", max_role_slots=5)
    test_db.add(tenant)
    await test_db.commit()
    await test_db.refresh(tenant)
    return tenant


@pytest.fixture
def make_user(test_db):
    """Factory for committed users"""

    async def _make_user(user_id: str, tenant_id: str | None, **fields) -> User:
        user = User(id=user_id, tenant_id=tenant_id, username=fields.pop("username", user_id), **fields)
        test_db.add(user)
        await test_db.commit()
        await test_db.refresh(user)
        return user

    return _make_user


@pytest.fixture
async def test_user(make_user, test_tenant):
    """Create test user"""
    return await make_user("test-user-id", test_tenant.id, email="test@example.com")


@pytest.fixture
def make_role(test_db):
    """Factory for committed roles, optionally held by the given users"""

    async def _make_role(
        tenant_id: str,
        role_alias: str,
        slot_position: int,
        permission_names: tuple[str, ...] = (),
        holders: tuple[str, ...] = (),
        **fields,
    ) -> TenantRole:
        role = TenantRole(
            tenant_id=tenant_id, role_alias=role_alias, slot_position=slot_position, **fields
        )
        test_db.add(role)
        await test_db.flush()

        result = await test_db.execute(
            select(Permission.id).where(Permission.name.in_(permission_names))
        )
        for permission_id in result.scalars().all():
            test_db.add(TenantRolePermission(tenant_role_id=role.id, permission_id=permission_id))
        for user_id in holders:
            test_db.add(
                UserRole(user_id=user_id, tenant_id=tenant_id, tenant_role_id=role.id, assigned_by="system")
            )
        await test_db.commit()
        await test_db.refresh(role)
        return role

    return _make_role


def build_authz_service(db) -> AuthorizationService:
    return AuthorizationService(db)


def build_assignment_validator(db) -> AssignmentGraphValidator:
    return AssignmentGraphValidator(
        user_repo=UserRepository(db),
        role_repo=TenantRoleRepository(db),
        user_role_repo=UserRoleRepository(db),
        authz_service=build_authz_service(db),
        security_events=SecurityEventService(db),
    )


def build_default_role_service(db) -> DefaultRoleService:
    return DefaultRoleService(
        tenant_repo=TenantRepository(db),
        role_repo=TenantRoleRepository(db),
        permission_repo=PermissionRepository(db),
        user_role_repo=UserRoleRepository(db),
        assignment_validator=build_assignment_validator(db),
        security_events=SecurityEventService(db),
    )


def build_tenant_role_service(db) -> TenantRoleService:
    role_repo = TenantRoleRepository(db)
    template_repo = RoleTemplateRepository(db)
    return TenantRoleService(
        tenant_repo=TenantRepository(db),
        role_repo=role_repo,
        template_repo=template_repo,
        permission_repo=PermissionRepository(db),
        user_role_repo=UserRoleRepository(db),
        allocator=RoleSlotAllocator(role_repo),
        projector=TemplateProjector(role_repo, template_repo),
        default_roles=build_default_role_service(db),
        authz_service=build_authz_service(db),
        security_events=SecurityEventService(db),
    )


@pytest.fixture
def assignment_validator(test_db):
    return build_assignment_validator(test_db)


@pytest.fixture
def default_role_service(test_db):
    return build_default_role_service(test_db)


@pytest.fixture
def role_service(test_db):
    return build_tenant_role_service(test_db)


def auth_headers_for(user_id: str, tenant_id: str) -> dict[str, str]:
    token = create_access_token(data={"sub": user_id, "tenant_id": tenant_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_tenant, test_user):
    """Generate auth headers with JWT token"""
    return auth_headers_for(test_user.id, test_tenant.id)


@pytest.fixture
def make_auth_headers():
    """Factory for auth headers of arbitrary users"""
    return auth_headers_for
