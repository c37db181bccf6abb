"""
Seed the global RBAC catalog and provision the Guest role for initialized tenants.

A tenant without roles is bootstrapped here, since no member holds a
permission in it yet.

Usage:
    python -m scripts.seed_rbac
    python -m scripts.seed_rbac --init-tenant TENANT_ID [--template-set education] [--admin-user USER_ID]
"""
import asyncio

from sqlalchemy import select

from src.application.services.assignment_graph_validator import (
    SYSTEM_ASSIGNER, AssignmentGraphValidator)
from src.application.services.authorization_service import \
    AuthorizationService
from src.application.services.catalog_seed_service import CatalogSeedService
from src.application.services.default_role_service import DefaultRoleService
from src.application.services.role_slot_allocator import RoleSlotAllocator
from src.application.services.security_event_service import \
    SecurityEventService
from src.application.services.template_projector import TemplateProjector
from src.application.services.tenant_role_service import TenantRoleService
from src.infrastructure.persistence.database import AsyncSessionLocal
from src.infrastructure.persistence.models.tenant import Tenant
from src.infrastructure.persistence.repositories import (PermissionRepository,
                                                         RoleTemplateRepository,
                                                         TenantRepository,
                                                         TenantRoleRepository,
                                                         UserRepository,
                                                         UserRoleRepository)
from src.shared.telemetry.logging import setup_logging


def build_default_role_service(db) -> DefaultRoleService:
    security_events = SecurityEventService(db)
    validator = AssignmentGraphValidator(
        user_repo=UserRepository(db),
        role_repo=TenantRoleRepository(db),
        user_role_repo=UserRoleRepository(db),
        authz_service=AuthorizationService(db),
        security_events=security_events,
    )
    return DefaultRoleService(
        tenant_repo=TenantRepository(db),
        role_repo=TenantRoleRepository(db),
        permission_repo=PermissionRepository(db),
        user_role_repo=UserRoleRepository(db),
        assignment_validator=validator,
        security_events=security_events,
    )


async def seed_catalog() -> None:
    async with AsyncSessionLocal() as db:
        async with db.begin():
            result = await CatalogSeedService(
                PermissionRepository(db), RoleTemplateRepository(db)
            ).seed()

    print(
        f"✓ Permissions: {result.permissions_created} created, {result.permissions_updated} updated"
    )
    print(f"✓ Templates: {result.templates_created} created, {result.templates_updated} updated")
    print(f"✓ Template permission links: {result.template_permission_links}")


async def provision_guest_roles() -> None:
    async with AsyncSessionLocal() as db:
        async with db.begin():
            tenants = (await db.execute(select(Tenant).order_by(Tenant.name))).scalars().all()
            print(f"\n🌱 Provisioning Guest role for {len(tenants)} tenant(s)...\n")

            role_repo = TenantRoleRepository(db)
            service = build_default_role_service(db)
            for tenant in tenants:
                if not await role_repo.count_by_tenant(tenant.id):
                    print(f"  - {tenant.name}: not initialized, skipped")
                    continue
                role_id = await service.ensure_tenant_has_guest_role(tenant.id)
                print(f"  ✓ {tenant.name}: Guest role {role_id}")


async def initialize_tenant(tenant_id: str, template_set: str | None, admin_user_id: str | None) -> None:
    """Bootstrap a tenant's roles and optionally hand its first member the slot 1 role"""
    async with AsyncSessionLocal() as db:
        async with db.begin():
            role_repo = TenantRoleRepository(db)
            template_repo = RoleTemplateRepository(db)
            authz_service = AuthorizationService(db)
            default_roles = build_default_role_service(db)
            service = TenantRoleService(
                tenant_repo=TenantRepository(db),
                role_repo=role_repo,
                template_repo=template_repo,
                permission_repo=PermissionRepository(db),
                user_role_repo=UserRoleRepository(db),
                allocator=RoleSlotAllocator(role_repo),
                projector=TemplateProjector(role_repo, template_repo),
                default_roles=default_roles,
                authz_service=authz_service,
                security_events=SecurityEventService(db),
            )
            created = await service.initialize_roles(
                tenant_id, actor_id=SYSTEM_ASSIGNER, template_set_name=template_set
            )
            for projected in created:
                print(f"  ✓ {projected.role.slot_position}: {projected.role.role_alias}")

            if admin_user_id and created:
                await default_roles.assignment_validator.assign_role(
                    admin_user_id, created[0].role.id, tenant_id, assigned_by=SYSTEM_ASSIGNER
                )
                print(f"  ✓ {admin_user_id} assigned {created[0].role.role_alias}")


async def main(args) -> None:
    setup_logging()
    await seed_catalog()
    if args.init_tenant:
        print(f"\n🌱 Initializing roles for tenant {args.init_tenant}...\n")
        await initialize_tenant(args.init_tenant, args.template_set, args.admin_user)
    await provision_guest_roles()
    print("\n✅ RBAC seeding completed successfully!")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Seed the RBAC catalog and bootstrap tenant roles")
    parser.add_argument("--init-tenant", metavar="TENANT_ID", help="Initialize roles for a tenant without any")
    parser.add_argument("--template-set", help="Template set to initialize from (default from settings)")
    parser.add_argument("--admin-user", metavar="USER_ID", help="Member to receive the slot 1 role")

    asyncio.run(main(parser.parse_args()))
