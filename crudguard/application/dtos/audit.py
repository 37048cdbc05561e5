"""DTO for audit events handed to the audit hook after each state-changing operation."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from crudguard.domain.enums import AuditAction


@dataclass(frozen=True)
class AuditEvent:
    """Input for appending one audit record. Append-only; no update."""

    action: AuditAction
    resource_type: str
    resource_id: str | None
    user_id: str | None
    role: str | None
    old_values: dict[str, Any] | None
    new_values: dict[str, Any] | None
    success: bool
    error_message: str | None
    request_id: str | None
    ip_address: str | None
    user_agent: str | None
    occurred_at: datetime
