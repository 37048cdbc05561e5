"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring: policy load (fatal on error), audit table creation,
DB engine dispose.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from crudguard.core.config import get_settings
from crudguard.core.policy_holder import PolicyHolder
from crudguard.infrastructure.persistence import database
from crudguard.infrastructure.persistence.models import AuditLog
from crudguard.infrastructure.persistence.repositories import TableCatalog

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: load and validate the access policy (ConfigurationException
    aborts startup), create the audit_log table if missing. Shutdown: SQL
    engine dispose.
    """
    settings = get_settings()

    # ---- Startup ----
    app.state.policy_holder = PolicyHolder.from_path(settings.policy_path)
    app.state.table_catalog = TableCatalog()

    engine = database.get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(
            lambda sync_conn: database.Base.metadata.create_all(
                sync_conn, tables=[AuditLog.__table__]
            )
        )
    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    # ---- Shutdown ----
    await database.dispose_engine()
