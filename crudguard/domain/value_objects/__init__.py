"""Domain value objects: field access levels and row predicates."""

from crudguard.domain.value_objects.field_access import (
    FieldAccess,
    FieldAccessLevel,
    NoAccess,
    RoleAccess,
    SystemAccess,
    parse_access_level,
)
from crudguard.domain.value_objects.predicate import (
    ColumnEquals,
    MatchAll,
    MatchNone,
    Predicate,
)

__all__ = [
    "ColumnEquals",
    "FieldAccess",
    "FieldAccessLevel",
    "MatchAll",
    "MatchNone",
    "NoAccess",
    "Predicate",
    "RoleAccess",
    "SystemAccess",
    "parse_access_level",
]
