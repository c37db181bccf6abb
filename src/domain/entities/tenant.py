"""
Tenant domain entity.

This represents the business concept of a tenant and its role capacity,
independent of how it's stored in the database.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from src.domain.exceptions import (CapacityExceededError,
                                   NoSlotsAvailableError,
                                   SlotPositionUnavailableError)


@dataclass
class TenantEntity:
    """
    Domain entity for Tenant role capacity (business logic separate from persistence)
    """

    id: str
    name: str
    max_role_slots: int
    default_role_id: str | None = None

    def has_capacity_for_role(self, used_slots: int) -> bool:
        """
        Business rule: a counted role may be added only while fewer than
        max_role_slots counted roles exist.
        """
        return used_slots < self.max_role_slots

    def assert_can_create_role(self, used_slots: int) -> None:
        if not self.has_capacity_for_role(used_slots):
            raise CapacityExceededError(self.max_role_slots)

    def available_slots(self, used_slots: int) -> int:
        return max(0, self.max_role_slots - used_slots)

    def next_free_slot_position(self, used_positions: Iterable[int]) -> int:
        """
        Lowest position in 1..max_role_slots not taken by an existing role.

        Positions outside that range (the Guest role sits at 0) never block a
        slot. Raises NoSlotsAvailableError when every position is taken.
        """
        taken = set(used_positions)
        for position in range(1, self.max_role_slots + 1):
            if position not in taken:
                return position
        raise NoSlotsAvailableError(self.id, self.max_role_slots)

    def assert_slot_position_free(self, position: int, used_positions: Iterable[int]) -> None:
        """Validate an explicitly requested slot position"""
        if position < 1 or position > self.max_role_slots or position in set(used_positions):
            raise SlotPositionUnavailableError(position, self.max_role_slots)

    def accepts_template_slot(self, slot_position: int) -> bool:
        """Templates beyond the tenant's plan are skipped during projection"""
        return slot_position <= self.max_role_slots
