"""
Security event service for audit tracking of RBAC and user mutations.

Events are staged in the caller's session so they commit (or roll back)
together with the change they describe.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from src.application.services.security_event_schema import \
    validate_security_event
from src.infrastructure.persistence.models.audit_log import AuditLog
from src.infrastructure.persistence.repositories.audit_log_repo import \
    AuditLogRepository
from src.shared.context import get_actor_context
from src.shared.enums import (ActorType, SecurityEventCategory,
                              SecurityEventSeverity, SecurityEventType)
from src.shared.telemetry.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

SENSITIVE_FIELDS = frozenset({
    "password",
    "hashed_password",
    "secret",
    "api_key",
    "token",
    "access_token",
    "refresh_token",
    "credentials",
})


class SecurityEventService:
    """
    Records security events in the audit log.

    Actor identity, IP and user agent default to the request context set by
    the authentication dependency; system jobs pass actor_type=SYSTEM.
    """

    def __init__(self, db: "AsyncSession") -> None:
        self.audit_repo = AuditLogRepository(db)

    async def emit(
        self,
        event_type: SecurityEventType,
        tenant_id: str,
        resource: str,
        details: dict[str, Any],
        resource_id: str | None = None,
        message: str | None = None,
        actor_id: str | None = None,
        actor_type: ActorType | None = None,
        severity: SecurityEventSeverity = SecurityEventSeverity.HIGH,
        category: SecurityEventCategory = SecurityEventCategory.RBAC,
    ) -> AuditLog:
        """
        Validate and stage one audit record.

        Payloads that fail schema validation are still recorded; the errors
        are logged so a missing detail never hides the event itself.
        """
        context = get_actor_context()
        resolved_actor_id = actor_id if actor_id is not None else context.user_id
        resolved_actor_type = actor_type or (
            ActorType.USER if resolved_actor_id else context.actor_type
        )
        sanitized = self._sanitize_details(details)

        payload = {
            "event_type": event_type.value,
            "tenant_id": tenant_id,
            "resource": resource,
            "resource_id": resource_id,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            "actor": {
                "type": resolved_actor_type.value,
                "id": resolved_actor_id,
                "ip_address": context.ip_address,
                "user_agent": context.user_agent,
            },
            "details": sanitized,
        }
        errors = validate_security_event(payload)
        if errors:
            logger.warning(
                "Security event %s for tenant %s failed validation: %s",
                event_type.value,
                tenant_id,
                "; ".join(errors),
            )

        record = AuditLog(
            tenant_id=tenant_id,
            actor_id=resolved_actor_id,
            actor_type=resolved_actor_type.value,
            action=event_type.value,
            resource=resource,
            resource_id=resource_id,
            category=category.value,
            severity=severity.value,
            message=message,
            details=sanitized,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            correlation_id=context.correlation_id or None,
        )
        self.audit_repo.add(record)

        logger.info(
            "Security event %s on %s %s (tenant: %s, actor: %s)",
            event_type.value,
            resource,
            resource_id,
            tenant_id,
            resolved_actor_id,
        )
        return record

    @staticmethod
    def _sanitize_details(data: dict[str, Any]) -> dict[str, Any]:
        """Redact secrets and make values JSON-storable"""
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in SENSITIVE_FIELDS:
                sanitized[key] = "[REDACTED]"
            elif isinstance(value, datetime):
                sanitized[key] = value.isoformat()
            elif isinstance(value, (set, frozenset, tuple)):
                sanitized[key] = sorted(value) if isinstance(value, (set, frozenset)) else list(value)
            else:
                sanitized[key] = value
        return sanitized
