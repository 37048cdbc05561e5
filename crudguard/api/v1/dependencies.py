"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the caller identity, the policy snapshot and
the entity use case. Routes depend only on these, never on infrastructure.

The snapshot is resolved once per request (FastAPI caches dependencies per
request), so every check in one request sees the same policy even if a
reload happens mid-request.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from crudguard.application.dtos.identity import RequestIdentity
from crudguard.application.interfaces.repositories import IEntityStore
from crudguard.application.interfaces.services import IAuditHook
from crudguard.application.services.request_authorizer import RequestAuthorizer
from crudguard.application.use_cases.entities import EntityService
from crudguard.core.config import Settings, get_settings
from crudguard.core.policy_holder import PolicyHolder
from crudguard.domain.entities.resource_policy import PolicySnapshot
from crudguard.domain.exceptions import AuthenticationException, ConfigurationException
from crudguard.infrastructure.persistence.database import (
    get_db_transactional,
    get_session_factory,
)
from crudguard.infrastructure.persistence.repositories import SqlEntityStore, TableCatalog
from crudguard.infrastructure.security.jwt import identity_from_token
from crudguard.infrastructure.services import DatabaseAuditHook

_http_bearer = HTTPBearer(auto_error=False)


def get_policy_holder(request: Request) -> PolicyHolder:
    """Policy holder set in app lifespan (app.state.policy_holder)."""
    holder = getattr(request.app.state, "policy_holder", None)
    if holder is None:
        raise ConfigurationException("Access policy is not loaded")
    return holder


def get_policy_snapshot(
    holder: Annotated[PolicyHolder, Depends(get_policy_holder)],
) -> PolicySnapshot:
    return holder.current()


def get_request_authorizer(
    snapshot: Annotated[PolicySnapshot, Depends(get_policy_snapshot)],
) -> RequestAuthorizer:
    return RequestAuthorizer(snapshot)


async def get_identity(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(_http_bearer)
    ],
) -> RequestIdentity:
    """Resolve the caller from the Bearer token. Raises AuthenticationException (401)."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationException()
    try:
        return identity_from_token(credentials.credentials)
    except ValueError as e:
        raise AuthenticationException("Invalid or expired token") from e


def get_table_catalog(request: Request) -> TableCatalog:
    catalog = getattr(request.app.state, "table_catalog", None)
    if catalog is None:
        catalog = TableCatalog()
        request.app.state.table_catalog = catalog
    return catalog


async def get_entity_store(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    catalog: Annotated[TableCatalog, Depends(get_table_catalog)],
) -> IEntityStore:
    """SQL entity store on the request's transactional session."""
    return SqlEntityStore(db, catalog)


async def get_audit_hook(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> IAuditHook:
    """Audit hook sharing the request's transaction with the entity store."""
    return DatabaseAuditHook(db, session_factory=get_session_factory())


def get_entity_service(
    snapshot: Annotated[PolicySnapshot, Depends(get_policy_snapshot)],
    store: Annotated[IEntityStore, Depends(get_entity_store)],
    audit_hook: Annotated[IAuditHook, Depends(get_audit_hook)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> EntityService:
    return EntityService(
        snapshot,
        store,
        audit_hook,
        max_page_size=settings.max_page_size,
    )
