"""
Application layer interfaces (ports).

These protocols define the contracts between the application layer
and the infrastructure layer, following the Dependency Inversion Principle.
"""

from src.application.interfaces.services import (IPermissionCache,
                                                 ISecurityEventEmitter)

__all__ = [
    "IPermissionCache",
    "ISecurityEventEmitter",
]
