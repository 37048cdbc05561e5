"""Domain layer: roles, resource policies, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation.
"""

from crudguard.domain.entities import (
    OperationRule,
    PolicySnapshot,
    ProtectedRecords,
    ResourcePolicy,
    Role,
    RoleRegistry,
)
from crudguard.domain.enums import AuditAction, DenyReason, Operation, RowPolicy
from crudguard.domain.exceptions import (
    AuditException,
    AuthenticationException,
    AuthorizationException,
    ConfigurationException,
    ConflictException,
    CrudGuardException,
    ImmutableFieldException,
    ResourceNotFoundException,
    ScopeException,
    ValidationException,
)

__all__ = [
    # Entities
    "OperationRule",
    "PolicySnapshot",
    "ProtectedRecords",
    "ResourcePolicy",
    "Role",
    "RoleRegistry",
    # Enums
    "AuditAction",
    "DenyReason",
    "Operation",
    "RowPolicy",
    # Exceptions
    "AuditException",
    "AuthenticationException",
    "AuthorizationException",
    "ConfigurationException",
    "ConflictException",
    "CrudGuardException",
    "ImmutableFieldException",
    "ResourceNotFoundException",
    "ScopeException",
    "ValidationException",
]
