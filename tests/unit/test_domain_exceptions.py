"""Tests for domain exceptions (error_code, message, details)."""

from crudguard.domain.exceptions import (
    AuditException,
    AuthenticationException,
    AuthorizationException,
    ConfigurationException,
    ConflictException,
    CrudGuardException,
    ImmutableFieldException,
    ResourceNotFoundException,
    RoleNotFoundException,
    ScopeException,
    StorageUnavailableException,
    ValidationException,
)


def test_base_exception_default_error_code() -> None:
    """Base CrudGuardException uses class name as error_code when not provided."""
    exc = CrudGuardException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "CrudGuardException"
    assert exc.details == {}


def test_base_exception_to_dict_envelope() -> None:
    exc = CrudGuardException("Oops", error_code="CUSTOM", details={"key": "value"})
    body = exc.to_dict()
    assert body["error"] == "CUSTOM"
    assert body["message"] == "Oops"
    assert body["details"] == {"key": "value"}
    assert "timestamp" in body


def test_validation_exception_with_field() -> None:
    exc = ValidationException("Invalid format", field="email")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "email"}


def test_validation_exception_sorts_fields() -> None:
    exc = ValidationException("Missing", fields=["name", "email"])
    assert exc.details == {"fields": ["email", "name"]}


def test_validation_exception_without_field() -> None:
    exc = ValidationException("Invalid")
    assert exc.details == {}


def test_authentication_exception_default_message() -> None:
    exc = AuthenticationException()
    assert exc.message == "Authentication required"
    assert exc.error_code == "AUTHENTICATION_ERROR"


def test_authorization_exception_builds_message_from_resource_and_action() -> None:
    """Resource and action are folded into the default message and details."""
    exc = AuthorizationException(
        resource="customers", action="delete", reason="below_minimum_role"
    )
    assert exc.message == "Permission denied: delete on customers"
    assert exc.error_code == "PERMISSION_DENIED"
    assert exc.details == {
        "resource": "customers",
        "action": "delete",
        "reason": "below_minimum_role",
    }


def test_authorization_exception_keeps_custom_message() -> None:
    exc = AuthorizationException(resource="roles", action="delete", message="No")
    assert exc.message == "No"


def test_scope_exception_serializes_like_not_found() -> None:
    """An out-of-scope row must be indistinguishable from a missing one."""
    missing = ResourceNotFoundException("work_orders", "2").to_dict()
    hidden = ScopeException("work_orders", "2").to_dict()
    missing.pop("timestamp")
    hidden.pop("timestamp")
    assert hidden == missing
    assert isinstance(ScopeException("work_orders", "2"), ResourceNotFoundException)


def test_immutable_field_exception() -> None:
    exc = ImmutableFieldException("work_orders", ["customer_id", "created_at"])
    assert exc.error_code == "IMMUTABLE_FIELD_VIOLATION"
    assert exc.details == {"resource": "work_orders", "fields": ["created_at", "customer_id"]}
    assert "created_at, customer_id" in exc.message


def test_conflict_exception() -> None:
    exc = ConflictException("roles")
    assert exc.error_code == "CONFLICT"
    assert exc.details == {"resource": "roles"}


def test_configuration_exception_path() -> None:
    exc = ConfigurationException("bad", "resources/roles")
    assert exc.error_code == "CONFIGURATION_ERROR"
    assert exc.details == {"path": "resources/roles"}
    assert ConfigurationException("bad").details == {}


def test_role_not_found_exception() -> None:
    exc = RoleNotFoundException("auditor")
    assert exc.error_code == "ROLE_NOT_FOUND"
    assert exc.details == {"role": "auditor"}


def test_audit_exception() -> None:
    exc = AuditException("work_orders", "created")
    assert exc.error_code == "AUDIT_ERROR"
    assert exc.details == {"resource": "work_orders", "action": "created"}


def test_storage_unavailable_exception() -> None:
    exc = StorageUnavailableException("customers")
    assert exc.error_code == "SERVICE_UNAVAILABLE"
    assert exc.details == {"resource": "customers"}
    assert StorageUnavailableException().details == {}
