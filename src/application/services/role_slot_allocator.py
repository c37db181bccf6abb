"""
Role slot allocation.

A tenant's plan caps how many counted roles it may hold (max_role_slots).
Each role also occupies a unique slot position used for ordering. This
service answers capacity and position questions against the current
transaction's view of the store; nothing here is cached.
"""

from src.domain.entities.tenant import TenantEntity
from src.domain.exceptions import CapacityExceededError, DuplicateRoleAliasError
from src.domain.value_objects import RoleAlias
from src.infrastructure.persistence.models.tenant import Tenant
from src.infrastructure.persistence.repositories.role_repo import \
    TenantRoleRepository
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def to_tenant_entity(tenant: Tenant) -> TenantEntity:
    return TenantEntity(
        id=tenant.id,
        name=tenant.name,
        max_role_slots=tenant.max_role_slots,
        default_role_id=tenant.default_role_id,
    )


class RoleSlotAllocator:
    def __init__(self, role_repo: TenantRoleRepository):
        self.role_repo = role_repo

    async def count_used_slots(self, tenant_id: str) -> int:
        """Number of the tenant's roles that consume a slot"""
        return await self.role_repo.count_counted_by_tenant(tenant_id)

    async def assert_can_create_role(self, tenant: Tenant) -> int:
        """
        Raise CapacityExceededError when the tenant has no free slot.

        Read only. Callers that go on to insert must hold the tenant row lock
        (TenantRepository.get_for_update) in the same transaction. Returns
        the used slot count.
        """
        used = await self.count_used_slots(tenant.id)
        try:
            to_tenant_entity(tenant).assert_can_create_role(used)
        except CapacityExceededError:
            logger.info(
                "Tenant %s at role capacity (%d/%d)", tenant.id, used, tenant.max_role_slots
            )
            raise
        return used

    async def next_free_slot_position(self, tenant_id: str, max_role_slots: int) -> int:
        """Lowest unused position in 1..max_role_slots (NoSlotsAvailableError if none)"""
        used_positions = await self.role_repo.get_used_slot_positions(tenant_id)
        entity = TenantEntity(id=tenant_id, name="", max_role_slots=max_role_slots)
        return entity.next_free_slot_position(used_positions)

    async def resolve_slot_position(self, tenant: Tenant, requested: int | None) -> int:
        """An explicitly requested position if it is free, else the next free one"""
        if requested is None:
            return await self.next_free_slot_position(tenant.id, tenant.max_role_slots)
        used_positions = await self.role_repo.get_used_slot_positions(tenant.id)
        to_tenant_entity(tenant).assert_slot_position_free(requested, used_positions)
        return requested

    async def assert_unique_alias(
        self, tenant_id: str, role_alias: RoleAlias | str, exclude_role_id: str | None = None
    ) -> None:
        """Raise DuplicateRoleAliasError if another role already uses the alias (ignoring case)"""
        alias = role_alias if isinstance(role_alias, RoleAlias) else RoleAlias(role_alias)
        existing = await self.role_repo.find_by_alias(tenant_id, alias.value, exclude_role_id)
        if existing is not None:
            raise DuplicateRoleAliasError(alias.value)
