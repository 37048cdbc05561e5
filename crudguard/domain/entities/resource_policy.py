"""Resource policy: operation rules, row-level security, and field access for one table."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from crudguard.domain.entities.role import RoleRegistry, normalize_role_name
from crudguard.domain.enums import Operation, RowPolicy
from crudguard.domain.value_objects.field_access import FieldAccess, SystemAccess


def _empty() -> Mapping[Any, Any]:
    return MappingProxyType({})


@dataclass(frozen=True)
class OperationRule:
    """Minimum role/priority for one CRUD operation.

    disabled=True means the operation is not reachable through the API for any
    role (system-only mutation path); minimum_role is then None.
    """

    minimum_role: str | None
    minimum_priority: int
    disabled: bool = False


@dataclass(frozen=True)
class ProtectedRecords:
    """System records (e.g. built-in roles) whose key fields cannot be changed or deleted."""

    field: str
    values: frozenset[str]
    fields: frozenset[str] = frozenset()
    prevent_delete: bool = True

    def protects(self, row: Mapping[str, Any]) -> bool:
        value = row.get(self.field)
        return value is not None and str(value) in self.values


@dataclass(frozen=True, eq=False)
class ResourcePolicy:
    """Everything the engine knows about one resource. Immutable once loaded.

    row_level_security maps role name to a raw policy id; ids outside the known
    set are kept as-is so the row filter compiler can fail closed on them.
    fields is None when the resource declares no field table (no field-level
    restriction); otherwise undeclared fields are hidden and not writable.
    """

    name: str
    table: str
    primary_key: str = "id"
    operations: Mapping[Operation, OperationRule] = field(default_factory=_empty)
    row_level_security: Mapping[str, str] | None = None
    row_scope: Mapping[RowPolicy, str] = field(default_factory=_empty)
    fields: Mapping[str, FieldAccess] | None = None
    immutable_fields: frozenset[str] = frozenset()
    required_fields: frozenset[str] = frozenset()
    sortable_fields: frozenset[str] = frozenset()
    searchable_fields: frozenset[str] = frozenset()
    protected: ProtectedRecords | None = None
    description: str = ""
    virtual: bool = False

    def rule_for(self, operation: Operation) -> OperationRule | None:
        return self.operations.get(operation)

    @property
    def has_row_level_security(self) -> bool:
        return self.row_level_security is not None

    @property
    def has_field_table(self) -> bool:
        return self.fields is not None

    def row_policy_for(self, role: str) -> str | None:
        """Raw RLS policy id for the role, or None when the role is not listed."""
        if self.row_level_security is None:
            return None
        return self.row_level_security.get(normalize_role_name(role))

    def field_access(self, name: str) -> FieldAccess | None:
        if self.fields is None:
            return None
        return self.fields.get(name)

    def is_system_field(self, name: str) -> bool:
        """True when no role may ever read the field (read level "system")."""
        access = self.field_access(name)
        return access is not None and isinstance(access.read, SystemAccess)


@dataclass(frozen=True, eq=False)
class PolicySnapshot:
    """Roles plus every resource policy, loaded together and never mutated.

    Published as a whole by the policy holder; a request keeps the snapshot
    it started with.
    """

    roles: RoleRegistry
    resources: Mapping[str, ResourcePolicy]
    source: str | None = None

    def resource(self, name: str) -> ResourcePolicy | None:
        return self.resources.get(name)

    def resource_names(self) -> tuple[str, ...]:
        return tuple(sorted(self.resources))
