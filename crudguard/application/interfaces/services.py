"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from crudguard.application.dtos.audit import AuditEvent


class IAuditHook(Protocol):
    """Protocol for recording audit events after state-changing operations.

    Implementations raise on failure; the caller decides how a failure affects
    the user-facing outcome.
    """

    async def record(self, event: AuditEvent) -> None:
        """Append one audit event."""
