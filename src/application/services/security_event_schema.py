"""
Security event schema definition.

Every audit record written by the RBAC service is validated against a JSON
Schema before it is stored. The base schema fixes the envelope; each event
type adds the detail keys an investigator needs to reconstruct the change.
"""

from typing import Any

from src.shared.enums import (ActorType, SecurityEventCategory,
                              SecurityEventSeverity, SecurityEventType)

# Detail keys that must be present (and non-null) per event type
REQUIRED_DETAIL_KEYS: dict[str, list[str]] = {
    SecurityEventType.RBAC_ROLE_CREATED.value: ["roleAlias", "slotPosition", "permissionCount"],
    SecurityEventType.RBAC_ROLE_UPDATED.value: ["roleId", "updatedFields"],
    SecurityEventType.RBAC_ROLE_DELETED.value: ["roleId", "roleAlias"],
    SecurityEventType.RBAC_ROLE_TEMPLATE_INITIALIZED.value: ["templateSetName", "createdRoleCount"],
    SecurityEventType.RBAC_ROLE_ASSIGNED.value: ["targetUserId", "tenantRoleId", "permissionCount"],
    SecurityEventType.RBAC_ROLE_UNASSIGNED.value: ["targetUserId", "tenantRoleId"],
    SecurityEventType.RBAC_DEFAULT_ROLE_PROVISIONED.value: ["roleId", "roleAlias"],
    SecurityEventType.USER_REPORTS_TO_CHANGED.value: ["userId"],
}

# Detail keys that must be present but may be null
REQUIRED_NULLABLE_DETAIL_KEYS: dict[str, list[str]] = {
    SecurityEventType.USER_REPORTS_TO_CHANGED.value: [
        "previousReportsToUserId",
        "newReportsToUserId",
    ],
}

# Event types that must carry an acting user
ACTOR_REQUIRED_EVENTS = frozenset({
    SecurityEventType.RBAC_ROLE_CREATED.value,
    SecurityEventType.RBAC_ROLE_UPDATED.value,
    SecurityEventType.RBAC_ROLE_DELETED.value,
    SecurityEventType.RBAC_ROLE_TEMPLATE_INITIALIZED.value,
    SecurityEventType.USER_REPORTS_TO_CHANGED.value,
})


def get_security_event_schema_definition() -> dict[str, Any]:
    """Base JSON Schema shared by every security event."""
    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "title": "Security Event",
        "type": "object",
        "required": ["event_type", "tenant_id", "resource", "actor", "category", "severity", "details"],
        "additionalProperties": False,
        "properties": {
            "event_type": {"type": "string", "enum": SecurityEventType.values()},
            "tenant_id": {"type": "string", "minLength": 1, "maxLength": 128},
            "resource": {"type": "string", "minLength": 1},
            "resource_id": {"type": ["string", "null"], "maxLength": 128},
            "message": {"type": ["string", "null"]},
            "category": {"type": "string", "enum": SecurityEventCategory.values()},
            "severity": {"type": "string", "enum": SecurityEventSeverity.values()},
            "actor": {
                "type": "object",
                "required": ["type"],
                "additionalProperties": False,
                "properties": {
                    "type": {"type": "string", "enum": ActorType.values()},
                    "id": {"type": ["string", "null"], "maxLength": 128},
                    "ip_address": {"type": ["string", "null"], "maxLength": 45},
                    "user_agent": {"type": ["string", "null"], "maxLength": 512},
                },
            },
            "details": {"type": "object", "additionalProperties": True},
        },
    }


def get_event_schema(event_type: str) -> dict[str, Any]:
    """Base schema narrowed with the detail and actor requirements of one event type"""
    schema = get_security_event_schema_definition()
    required = REQUIRED_DETAIL_KEYS.get(event_type, [])
    nullable = REQUIRED_NULLABLE_DETAIL_KEYS.get(event_type, [])

    details_schema: dict[str, Any] = schema["properties"]["details"]
    details_schema["required"] = required + nullable
    details_schema["properties"] = {key: {"not": {"type": "null"}} for key in required}

    if event_type in ACTOR_REQUIRED_EVENTS:
        actor_schema = schema["properties"]["actor"]
        actor_schema["required"] = ["type", "id"]
        actor_schema["properties"]["id"] = {"type": "string", "minLength": 1, "maxLength": 128}
    return schema


def validate_security_event(payload: dict[str, Any]) -> list[str]:
    """
    Validate an event payload without raising.

    Returns a list of validation errors (empty list if valid).
    """
    import jsonschema

    schema = get_event_schema(str(payload.get("event_type", "")))
    validator = jsonschema.Draft7Validator(schema)
    return [error.message for error in validator.iter_errors(payload)]
