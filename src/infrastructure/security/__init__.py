"""Security infrastructure - bearer token handling."""

from src.infrastructure.security.jwt import create_access_token, verify_token

__all__ = [
    "create_access_token",
    "verify_token",
]
