"""
Request context management using contextvars.

Holds the authenticated actor, request origin and correlation id for the
current request so that audit records and log lines can be enriched without
threading them through every call.

Usage:
    # In the auth dependency:
    set_current_user(user_id="user123", tenant_id="tenant1")

    # Anywhere below it:
    actor = get_actor_context()
"""

from contextvars import ContextVar
from dataclasses import dataclass

from src.shared.enums import ActorType

_current_user_id: ContextVar[str | None] = ContextVar("current_user_id", default=None)
_current_tenant_id: ContextVar[str | None] = ContextVar("current_tenant_id", default=None)
_current_actor_type: ContextVar[ActorType] = ContextVar("current_actor_type", default=ActorType.SYSTEM)
_current_ip_address: ContextVar[str | None] = ContextVar("current_ip_address", default=None)
_current_user_agent: ContextVar[str | None] = ContextVar("current_user_agent", default=None)
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


@dataclass(frozen=True)
class ActorContext:
    """Immutable snapshot of the current actor context."""

    user_id: str | None
    actor_type: ActorType
    tenant_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    correlation_id: str = ""


def set_current_user(
    user_id: str | None,
    tenant_id: str | None = None,
    actor_type: ActorType = ActorType.USER,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> None:
    """Set the authenticated actor for this request."""
    _current_user_id.set(user_id)
    _current_tenant_id.set(tenant_id)
    _current_actor_type.set(actor_type)
    _current_ip_address.set(ip_address)
    _current_user_agent.set(user_agent)


def clear_current_user() -> None:
    """Reset to the anonymous system actor."""
    _current_user_id.set(None)
    _current_tenant_id.set(None)
    _current_actor_type.set(ActorType.SYSTEM)
    _current_ip_address.set(None)
    _current_user_agent.set(None)


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def get_correlation_id() -> str:
    """Correlation id of the current request, empty outside a request"""
    return _correlation_id.get()


def get_current_actor_id() -> str | None:
    """Get the current user ID, or None if not authenticated."""
    return _current_user_id.get()


def get_current_actor_type() -> ActorType:
    """Get the current actor type (defaults to SYSTEM if not set)."""
    return _current_actor_type.get()


def get_actor_context() -> ActorContext:
    """Get a snapshot of the current actor context."""
    return ActorContext(
        user_id=_current_user_id.get(),
        actor_type=_current_actor_type.get(),
        tenant_id=_current_tenant_id.get(),
        ip_address=_current_ip_address.get(),
        user_agent=_current_user_agent.get(),
        correlation_id=_correlation_id.get(),
    )
