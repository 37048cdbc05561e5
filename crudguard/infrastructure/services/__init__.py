"""Infrastructure services implementing application service ports."""

from crudguard.infrastructure.services.audit_hook import DatabaseAuditHook

__all__ = ["DatabaseAuditHook"]
