"""SQL audit hook: appends one audit_log row per state-changing entity operation (IAuditHook)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from crudguard.application.dtos.audit import AuditEvent
from crudguard.infrastructure.persistence.models.audit_log import AuditLog
from crudguard.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


def _json_values(values: dict[str, Any] | None) -> dict[str, Any] | None:
    return jsonable_encoder(values) if values is not None else None


def _to_row(event: AuditEvent) -> AuditLog:
    return AuditLog(
        id=generate_cuid(),
        user_id=event.user_id,
        role=event.role,
        action=event.action.value,
        resource_type=event.resource_type,
        resource_id=event.resource_id,
        old_values=_json_values(event.old_values),
        new_values=_json_values(event.new_values),
        ip_address=event.ip_address,
        user_agent=event.user_agent,
        request_id=event.request_id,
        timestamp=event.occurred_at,
        success=event.success,
        error_message=event.error_message,
    )


class DatabaseAuditHook:
    """Writes audit rows through SQLAlchemy.

    Successful operations are written in the request's own transaction, so the
    mutation commits only together with its audit row. Failed operations are
    written in a separate short transaction because the request transaction
    is about to roll back.
    """

    def __init__(
        self,
        db: AsyncSession,
        session_factory: Callable[[], AsyncSession] | None = None,
    ) -> None:
        self.db = db
        self.session_factory = session_factory

    async def record(self, event: AuditEvent) -> None:
        if event.success or self.session_factory is None:
            self.db.add(_to_row(event))
            await self.db.flush()
            return
        async with self.session_factory() as session:
            async with session.begin():
                session.add(_to_row(event))
        logger.info(
            "Recorded failed %s on %s/%s",
            event.action.value,
            event.resource_type,
            event.resource_id,
        )
