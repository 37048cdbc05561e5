"""Domain enumerations for crudguard.

Fixed sets of values used by the access engine: CRUD operations, row-level
security policy ids, deny reasons and audit actions.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class Operation(_ValuesMixin, str, Enum):
    """CRUD operation evaluated against a resource's operation rules."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def is_write(self) -> bool:
        """True for state-changing operations (audited)."""
        return self is not Operation.READ


class RowPolicy(_ValuesMixin, str, Enum):
    """Closed set of row-level security policies understood by the row filter compiler.

    own_records_only and assigned_records_only bind to a column declared in the
    resource's rowScope table.
    """

    ALL_RECORDS = "all_records"
    PUBLIC_RESOURCE = "public_resource"
    OWN_RECORDS_ONLY = "own_records_only"
    ASSIGNED_RECORDS_ONLY = "assigned_records_only"
    DENY_ALL = "deny_all"

    @property
    def binds_column(self) -> bool:
        """True when the policy narrows rows by comparing a column to an owned id."""
        return self in (RowPolicy.OWN_RECORDS_ONLY, RowPolicy.ASSIGNED_RECORDS_ONLY)


class DenyReason(_ValuesMixin, str, Enum):
    """Why the permission evaluator denied an operation."""

    UNKNOWN_RESOURCE = "unknown_resource"
    UNKNOWN_OPERATION = "unknown_operation"
    UNKNOWN_ROLE = "unknown_role"
    OPERATION_DISABLED = "operation_disabled"
    BELOW_MINIMUM_ROLE = "below_minimum_role"
    PROTECTED_RECORD = "protected_record"
    OUTSIDE_ROW_SCOPE = "outside_row_scope"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit action recorded for each state-changing operation."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"

    @classmethod
    def for_operation(cls, operation: Operation) -> "AuditAction":
        """Map a write operation to its audit action."""
        return {
            Operation.CREATE: cls.CREATED,
            Operation.UPDATE: cls.UPDATED,
            Operation.DELETE: cls.DELETED,
        }[operation]
