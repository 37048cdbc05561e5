"""ORM models owned by the service (business tables are reflected, not modelled)."""

from crudguard.infrastructure.persistence.models.audit_log import AuditLog

__all__ = ["AuditLog"]
