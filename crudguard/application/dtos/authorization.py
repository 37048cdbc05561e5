"""DTOs produced by the access engine (decisions and write projections)."""

from dataclasses import dataclass, field
from typing import Any

from crudguard.domain.enums import DenyReason, Operation
from crudguard.domain.value_objects.predicate import Predicate


@dataclass(frozen=True)
class PermissionDecision:
    """Allow/deny answer of the permission evaluator."""

    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls) -> "PermissionDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "PermissionDecision":
        return cls(allowed=False, reason=reason)


@dataclass(frozen=True)
class AuthorizationDecision:
    """Everything a handler needs before and after the storage call, for one request.

    readable_fields / writable_fields are None when the resource declares no
    field table (no field-level restriction).
    """

    resource: str
    operation: Operation
    operation_allowed: bool
    row_predicate: Predicate
    readable_fields: frozenset[str] | None
    writable_fields: frozenset[str] | None


@dataclass(frozen=True)
class WriteProjection:
    """Result of projecting an inbound payload through the caller's write access.

    accepted: keys the caller may write, with their values.
    rejected: keys dropped for insufficient write access (or undeclared).
    unchanged: immutable keys resubmitted with their stored value (dropped silently).
    immutable_violations: immutable keys whose value differs from the stored one.
    length_violations: string values longer than the field's maxLength.
    """

    accepted: dict[str, Any] = field(default_factory=dict)
    rejected: tuple[str, ...] = ()
    unchanged: tuple[str, ...] = ()
    immutable_violations: tuple[str, ...] = ()
    length_violations: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.immutable_violations and not self.length_violations
