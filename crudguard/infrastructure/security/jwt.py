"""JWT verification: turns a bearer token into the RequestIdentity the engine consumes.

Tokens are issued by the upstream identity provider with a shared HS256 secret.
create_access_token exists for local development and tests.
"""

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from types import MappingProxyType
from typing import Any, cast

from jose import JWTError, jwt

from crudguard.application.dtos.identity import RequestIdentity
from crudguard.core.config import get_settings


def create_access_token(
    user_id: str,
    role: str,
    owned_ids: Mapping[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed token carrying sub, role and owned_ids claims."""
    settings = get_settings()
    expire = datetime.now(UTC) + (expires_delta or timedelta(minutes=60))
    to_encode: dict[str, Any] = {
        "sub": user_id,
        settings.role_claim: role,
        settings.owned_ids_claim: dict(owned_ids or {}),
        "exp": expire,
    }
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Enforces presence of exp and sub. Raises ValueError if the token is
    invalid, expired, or missing required claims.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if "sub" not in payload:
        raise ValueError("Token missing required claim: sub")
    return payload


def identity_from_token(token: str) -> RequestIdentity:
    """Decode a token into a RequestIdentity. Raises ValueError when unusable."""
    settings = get_settings()
    payload = verify_token(token)
    role = payload.get(settings.role_claim)
    if not isinstance(role, str) or not role.strip():
        raise ValueError(f"Token missing required claim: {settings.role_claim}")
    owned = payload.get(settings.owned_ids_claim) or {}
    if not isinstance(owned, dict):
        raise ValueError(f"Claim {settings.owned_ids_claim} must be an object")
    return RequestIdentity(
        user_id=str(payload["sub"]),
        role=role.strip().lower(),
        owned_entity_ids=MappingProxyType(dict(owned)),
    )
