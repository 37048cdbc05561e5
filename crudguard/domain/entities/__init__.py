"""Domain entities: roles, resource policies and the policy snapshot."""

from crudguard.domain.entities.resource_policy import (
    OperationRule,
    PolicySnapshot,
    ProtectedRecords,
    ResourcePolicy,
)
from crudguard.domain.entities.role import Role, RoleRegistry, normalize_role_name

__all__ = [
    "OperationRule",
    "PolicySnapshot",
    "ProtectedRecords",
    "ResourcePolicy",
    "Role",
    "RoleRegistry",
    "normalize_role_name",
]
