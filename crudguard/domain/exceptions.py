"""Domain exceptions for the crudguard service.

Defines domain-level exceptions for authorization, scoping, validation and
policy configuration. They are independent of HTTP; the presentation layer
maps error_code to a status code in crudguard.core.exception_handlers.
"""

from typing import Any

from crudguard.shared.utils.datetime import utc_now


class CrudGuardException(Exception):
    """Base exception for all crudguard errors.

    Attributes:
        message: Human-readable error description (never predicate text or SQL).
        error_code: Machine-readable error kind.
        details: Additional error context (e.g. field, resource).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the response envelope: error kind, message, details, timestamp."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": utc_now().isoformat(),
        }


class ValidationException(CrudGuardException):
    """Raised when a payload is malformed or a field value is not acceptable."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        fields: list[str] | None = None,
    ) -> None:
        """Initialize with message and the offending field(s).

        Args:
            message: Description of the validation failure.
            field: Optional single field that failed validation.
            fields: Optional list of fields that failed validation.
        """
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if fields:
            details["fields"] = sorted(fields)
        super().__init__(message, "VALIDATION_ERROR", details)


class ImmutableFieldException(CrudGuardException):
    """Raised when an update tries to change the value of an immutable field."""

    def __init__(self, resource: str, fields: list[str]) -> None:
        super().__init__(
            f"Immutable field(s) cannot be changed: {', '.join(sorted(fields))}",
            "IMMUTABLE_FIELD_VIOLATION",
            {"resource": resource, "fields": sorted(fields)},
        )


class AuthenticationException(CrudGuardException):
    """Raised when the request carries no identity or an invalid one."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(CrudGuardException):
    """Raised when the caller's role may not perform the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        reason: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, reason and message.

        Args:
            resource: Resource name (e.g. 'work_orders').
            action: Operation that was attempted (e.g. 'delete').
            reason: Machine-readable deny reason (e.g. 'operation_disabled').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action and message == "Permission denied":
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        if reason:
            details["reason"] = reason
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(CrudGuardException):
    """Raised when a requested row or resource does not exist."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Resource name (e.g. 'work_orders').
            resource_id: The id that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ScopeException(ResourceNotFoundException):
    """Raised when a row exists but lies outside the caller's row scope.

    Serializes exactly like ResourceNotFoundException so that callers cannot
    tell an out-of-scope row from a missing one.
    """


class ConflictException(CrudGuardException):
    """Raised when storage rejects a write because of a uniqueness or FK constraint."""

    def __init__(self, resource: str, message: str = "Conflicting record") -> None:
        super().__init__(message, "CONFLICT", {"resource": resource})


class ConfigurationException(CrudGuardException):
    """Raised when the policy document is internally inconsistent (fatal at load time)."""

    def __init__(self, message: str, path: str | None = None) -> None:
        details = {"path": path} if path else {}
        super().__init__(message, "CONFIGURATION_ERROR", details)


class RoleNotFoundException(CrudGuardException):
    """Raised when a role name is not in the role registry."""

    def __init__(self, role: str) -> None:
        super().__init__(f"Unknown role: {role}", "ROLE_NOT_FOUND", {"role": role})


class AuditException(CrudGuardException):
    """Raised when the audit hook could not record a state-changing operation."""

    def __init__(self, resource: str, action: str) -> None:
        super().__init__(
            "Operation failed: audit trail could not be recorded",
            "AUDIT_ERROR",
            {"resource": resource, "action": action},
        )


class StorageUnavailableException(CrudGuardException):
    """Raised when the storage backend cannot be reached."""

    def __init__(self, resource: str | None = None) -> None:
        super().__init__(
            message="Storage is temporarily unavailable",
            error_code="SERVICE_UNAVAILABLE",
            details={"resource": resource} if resource else None,
        )
