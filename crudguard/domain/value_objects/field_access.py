"""Field access levels: which role (if any) may read or write a field.

The policy document spells access levels as plain strings ("system", "none",
or a role name). They are parsed once at load time into the sum type
FieldAccessLevel so request-time code never compares raw strings.
"""

from dataclasses import dataclass

SYSTEM_MARKER = "system"
NONE_MARKER = "none"


@dataclass(frozen=True)
class SystemAccess:
    """Never exposed to any role through the API (read or write)."""

    def __str__(self) -> str:
        return SYSTEM_MARKER


@dataclass(frozen=True)
class NoAccess:
    """No role may use this direction (e.g. immutable via the API when used for write)."""

    def __str__(self) -> str:
        return NONE_MARKER


@dataclass(frozen=True)
class RoleAccess:
    """Roles at or above `role` in priority may use this direction."""

    role: str

    def __str__(self) -> str:
        return self.role


FieldAccessLevel = SystemAccess | NoAccess | RoleAccess


def parse_access_level(raw: str) -> FieldAccessLevel:
    """Parse a policy-document access string into a FieldAccessLevel.

    Role names are normalized to lowercase; whether the role exists is checked
    by the policy loader, which knows the role registry.
    """
    value = raw.strip().lower()
    if value == SYSTEM_MARKER:
        return SystemAccess()
    if value == NONE_MARKER:
        return NoAccess()
    return RoleAccess(value)


@dataclass(frozen=True)
class FieldAccess:
    """Per-field read and write levels, plus an optional maximum string length."""

    read: FieldAccessLevel
    write: FieldAccessLevel
    max_length: int | None = None
