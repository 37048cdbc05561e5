"""Token verification."""

from crudguard.infrastructure.security.jwt import (
    create_access_token,
    identity_from_token,
    verify_token,
)

__all__ = ["create_access_token", "identity_from_token", "verify_token"]
