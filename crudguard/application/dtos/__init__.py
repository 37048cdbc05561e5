"""Application DTOs (no dependency on ORM or HTTP)."""

from crudguard.application.dtos.audit import AuditEvent
from crudguard.application.dtos.authorization import (
    AuthorizationDecision,
    PermissionDecision,
    WriteProjection,
)
from crudguard.application.dtos.entity import EntityPage, ListQuery
from crudguard.application.dtos.identity import RequestIdentity

__all__ = [
    "AuditEvent",
    "AuthorizationDecision",
    "EntityPage",
    "ListQuery",
    "PermissionDecision",
    "RequestIdentity",
    "WriteProjection",
]
