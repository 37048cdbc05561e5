"""Generic entity use cases: list, get, create, update and delete for any resource.

One service serves every resource; behavior comes from the resource policy,
so adding a resource needs a policy entry and a table, never new code.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any

from crudguard.application.dtos.audit import AuditEvent
from crudguard.application.dtos.entity import EntityPage, ListQuery
from crudguard.application.dtos.identity import RequestIdentity
from crudguard.application.interfaces.repositories import IEntityStore
from crudguard.application.interfaces.services import IAuditHook
from crudguard.application.services.request_authorizer import RequestAuthorizer
from crudguard.domain.entities.resource_policy import PolicySnapshot, ResourcePolicy
from crudguard.domain.enums import AuditAction, DenyReason, Operation
from crudguard.domain.exceptions import (
    AuditException,
    AuthorizationException,
    CrudGuardException,
    ResourceNotFoundException,
    ScopeException,
    ValidationException,
)
from crudguard.domain.value_objects.predicate import MatchAll, Predicate
from crudguard.shared.context import get_request_context
from crudguard.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class EntityService:
    """Runs the authorize → scope → store → project → audit flow for one request.

    Existence and scope are checked together by asking storage for the row
    under the caller's predicate, so an out-of-scope row is reported exactly
    like a missing one (404). Once a mutation has been issued, it and its
    audit record run under asyncio.shield so cancelling the request cannot
    leave a mutation without an audit entry.
    """

    def __init__(
        self,
        snapshot: PolicySnapshot,
        store: IEntityStore,
        audit_hook: IAuditHook,
        max_page_size: int = 200,
    ) -> None:
        self.snapshot = snapshot
        self.authorizer = RequestAuthorizer(snapshot)
        self.store = store
        self.audit_hook = audit_hook
        self.max_page_size = max_page_size

    def _policy(self, resource: str) -> ResourcePolicy:
        policy = self.snapshot.resource(resource)
        if policy is None or policy.virtual:
            raise ResourceNotFoundException("resource", resource)
        return policy

    @staticmethod
    def _not_found(resource: str, entity_id: str, predicate: Predicate) -> ResourceNotFoundException:
        if isinstance(predicate, MatchAll):
            return ResourceNotFoundException(resource, entity_id)
        return ScopeException(resource, entity_id)

    @staticmethod
    def _check_in_scope(
        resource: str, operation: Operation, predicate: Predicate, row: dict[str, Any]
    ) -> None:
        """A written row must stay inside the caller's row scope."""
        if not predicate.matches(row):
            raise AuthorizationException(
                resource=resource,
                action=operation.value,
                reason=DenyReason.OUTSIDE_ROW_SCOPE.value,
                message="Record would fall outside your row scope",
            )

    async def list(
        self, identity: RequestIdentity | None, resource: str, query: ListQuery
    ) -> EntityPage:
        """Return one page of rows visible to the caller, projected for reading.

        Filtering or sorting on a field the caller cannot read is rejected so
        filters cannot be used to discover hidden values. A search term only
        matches searchable fields the caller can read; when there are none it
        matches no rows.
        """
        policy = self._policy(resource)
        decision = self.authorizer.authorize(identity, resource, Operation.READ)
        readable = decision.readable_fields
        if readable is not None:
            hidden = [name for name in query.filters if name not in readable]
            if hidden:
                raise ValidationException("Cannot filter by field(s)", fields=hidden)
        if query.sort is not None:
            if (readable is not None and query.sort not in readable) or (
                policy.sortable_fields and query.sort not in policy.sortable_fields
            ):
                raise ValidationException("Cannot sort by field", field=query.sort)

        search = query.search.strip() if query.search else ""
        search_fields: tuple[str, ...] = ()
        if search:
            searchable = policy.searchable_fields
            if readable is not None:
                searchable = searchable & readable
            search_fields = tuple(sorted(searchable))

        page = replace(
            query,
            skip=max(query.skip, 0),
            limit=min(max(query.limit, 1), self.max_page_size),
            search=search or None,
            search_fields=search_fields,
        )
        rows = await self.store.list(policy, decision.row_predicate, page)
        return EntityPage(
            items=self.authorizer.project_read(identity, resource, rows),
            skip=page.skip,
            limit=page.limit,
        )

    async def get(
        self, identity: RequestIdentity | None, resource: str, entity_id: str
    ) -> dict[str, Any]:
        policy = self._policy(resource)
        decision = self.authorizer.authorize(identity, resource, Operation.READ)
        row = await self.store.get(policy, entity_id, decision.row_predicate)
        if row is None:
            raise self._not_found(resource, entity_id, decision.row_predicate)
        return self.authorizer.project_read(identity, resource, row)

    async def create(
        self, identity: RequestIdentity | None, resource: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        policy = self._policy(resource)
        decision = self.authorizer.authorize(identity, resource, Operation.CREATE)
        projection = self.authorizer.project_write(identity, resource, payload)
        self.authorizer.check_write(resource, projection)
        missing = [name for name in policy.required_fields if name not in projection.accepted]
        if missing:
            raise ValidationException("Missing required field(s)", fields=missing)
        if not projection.accepted:
            raise ValidationException("No writable fields provided")
        values = projection.accepted
        self._check_in_scope(resource, Operation.CREATE, decision.row_predicate, values)

        async def insert() -> dict[str, Any]:
            return await self.store.create(policy, values)

        row = await self._mutate(
            identity, policy, Operation.CREATE, None, None, values, insert
        )
        return self.authorizer.project_read(identity, resource, row)

    async def update(
        self,
        identity: RequestIdentity | None,
        resource: str,
        entity_id: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """Apply the caller's writable, changed fields to one in-scope row.

        An immutable field resubmitted with its stored value is ignored; a
        changed immutable value rejects the whole update.
        """
        policy = self._policy(resource)
        decision = self.authorizer.authorize(identity, resource, Operation.UPDATE)
        predicate = decision.row_predicate
        current = await self.store.get(policy, entity_id, predicate)
        if current is None:
            raise self._not_found(resource, entity_id, predicate)

        projection = self.authorizer.project_write(identity, resource, payload, current)
        self.authorizer.check_write(resource, projection)
        if not projection.accepted:
            raise ValidationException("No updatable fields provided")
        values = projection.accepted
        self.authorizer.check_protected(resource, current, Operation.UPDATE, values)
        self._check_in_scope(resource, Operation.UPDATE, predicate, {**current, **values})
        old_values = {name: current.get(name) for name in values}

        async def apply() -> dict[str, Any]:
            row = await self.store.update(policy, entity_id, values, predicate)
            if row is None:
                raise self._not_found(resource, entity_id, predicate)
            return row

        row = await self._mutate(
            identity, policy, Operation.UPDATE, entity_id, old_values, values, apply
        )
        return self.authorizer.project_read(identity, resource, row)

    async def delete(
        self, identity: RequestIdentity | None, resource: str, entity_id: str
    ) -> None:
        policy = self._policy(resource)
        decision = self.authorizer.authorize(identity, resource, Operation.DELETE)
        predicate = decision.row_predicate
        current = await self.store.get(policy, entity_id, predicate)
        if current is None:
            raise self._not_found(resource, entity_id, predicate)
        self.authorizer.check_protected(resource, current, Operation.DELETE)

        async def remove() -> None:
            if not await self.store.delete(policy, entity_id, predicate):
                raise self._not_found(resource, entity_id, predicate)

        await self._mutate(
            identity, policy, Operation.DELETE, entity_id, dict(current), None, remove
        )

    async def _mutate(
        self,
        identity: RequestIdentity | None,
        policy: ResourcePolicy,
        operation: Operation,
        entity_id: str | None,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
        mutation: Callable[[], Awaitable[Any]],
    ) -> Any:
        return await asyncio.shield(
            self._mutate_and_audit(
                identity, policy, operation, entity_id, old_values, new_values, mutation
            )
        )

    async def _mutate_and_audit(
        self,
        identity: RequestIdentity | None,
        policy: ResourcePolicy,
        operation: Operation,
        entity_id: str | None,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
        mutation: Callable[[], Awaitable[Any]],
    ) -> Any:
        event = self._event(
            identity,
            policy.name,
            operation,
            entity_id,
            self._audit_values(policy, old_values),
            self._audit_values(policy, new_values),
        )
        try:
            result = await mutation()
        except Exception as e:
            error_message = e.message if isinstance(e, CrudGuardException) else type(e).__name__
            try:
                await self.audit_hook.record(
                    replace(event, success=False, error_message=error_message)
                )
            except Exception:
                logger.exception(
                    "Audit hook failed recording failed %s on %s", operation.value, policy.name
                )
            raise

        if entity_id is None and isinstance(result, dict):
            created_id = result.get(policy.primary_key)
            event = replace(event, resource_id=str(created_id) if created_id is not None else None)
        try:
            await self.audit_hook.record(event)
        except Exception as e:
            logger.exception(
                "Audit hook failed for %s on %s/%s",
                operation.value,
                policy.name,
                event.resource_id,
            )
            raise AuditException(policy.name, event.action.value) from e
        return result

    @staticmethod
    def _audit_values(
        policy: ResourcePolicy, values: dict[str, Any] | None
    ) -> dict[str, Any] | None:
        """Values as recorded in the audit trail; system fields are never recorded."""
        if values is None:
            return None
        return {k: v for k, v in values.items() if not policy.is_system_field(k)}

    @staticmethod
    def _event(
        identity: RequestIdentity | None,
        resource: str,
        operation: Operation,
        entity_id: str | None,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
    ) -> AuditEvent:
        ctx = get_request_context()
        return AuditEvent(
            action=AuditAction.for_operation(operation),
            resource_type=resource,
            resource_id=entity_id,
            user_id=identity.user_id if identity else None,
            role=identity.role if identity else None,
            old_values=old_values,
            new_values=new_values,
            success=True,
            error_message=None,
            request_id=ctx.request_id,
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
            occurred_at=utc_now(),
        )
