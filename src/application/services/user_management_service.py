"""
User update orchestration for the PATCH /users/{user_id} endpoint.

Profile fields, the reports-to manager and the role assignment can change
in one request. Role changes need their own capability on top of
users.update. Everything runs in the request transaction, so a failed
check on any part leaves the user untouched.
"""

from collections.abc import Mapping
from typing import Any

from src.application.services.assignment_graph_validator import \
    AssignmentGraphValidator
from src.domain.exceptions import ResourceNotFoundException
from src.infrastructure.persistence.models.user import User
from src.infrastructure.persistence.repositories.user_repo import \
    UserRepository
from src.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

PROFILE_FIELDS = ("email", "first_name", "last_name", "is_active")


class UserManagementService:
    def __init__(self, user_repo: UserRepository, assignment_validator: AssignmentGraphValidator):
        self.user_repo = user_repo
        self.assignment_validator = assignment_validator

    async def update_user(
        self, tenant_id: str, user_id: str, changes: Mapping[str, Any], actor_id: str
    ) -> User:
        """
        Apply a partial update; only keys present in `changes` are touched.

        `tenant_role_id` requires roles.assign in addition to users.update,
        which the route has already checked.
        """
        user = await self.user_repo.get_by_id_and_tenant(user_id, tenant_id)
        if user is None:
            raise ResourceNotFoundException("User", user_id, "User not found")

        role_id = changes.get("tenant_role_id")
        if role_id is not None:
            await self.assignment_validator.assert_can_change_role_assignment(actor_id, tenant_id)

        if "reports_to_user_id" in changes:
            user = await self.assignment_validator.set_reports_to(
                user_id, changes["reports_to_user_id"], tenant_id
            )

        if role_id is not None:
            await self.assignment_validator.assign_role(user_id, role_id, tenant_id, assigned_by=actor_id)

        profile_changes = {key: changes[key] for key in PROFILE_FIELDS if key in changes}
        if profile_changes.get("is_active", False) is None:
            del profile_changes["is_active"]
        if profile_changes:
            for key, value in profile_changes.items():
                setattr(user, key, value)
            user = await self.user_repo.update(user)
            logger.info("Updated user %s fields %s", user_id, sorted(profile_changes))

        return user
