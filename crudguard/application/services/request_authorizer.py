"""Request authorizer: the single entry point route handlers use before and after storage.

Composes the permission evaluator, row filter compiler and field projector
over one policy snapshot. A request builds one authorizer from the snapshot
it started with and never sees a later reload.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from crudguard.application.dtos.authorization import AuthorizationDecision, WriteProjection
from crudguard.application.dtos.identity import RequestIdentity
from crudguard.application.services.field_projector import FieldProjector
from crudguard.application.services.permission_evaluator import PermissionEvaluator
from crudguard.application.services.row_filter_compiler import RowFilterCompiler
from crudguard.domain.entities.resource_policy import PolicySnapshot
from crudguard.domain.enums import DenyReason, Operation
from crudguard.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ImmutableFieldException,
    ValidationException,
)

logger = logging.getLogger(__name__)


class RequestAuthorizer:
    """Per-request orchestration of the access engine.

    authorize() raises AuthenticationException for a missing identity and
    AuthorizationException when the operation is denied; otherwise it returns
    the decision (row predicate plus field sets) the handler applies.
    """

    def __init__(self, snapshot: PolicySnapshot) -> None:
        self.snapshot = snapshot
        self.evaluator = PermissionEvaluator(snapshot)
        self.compiler = RowFilterCompiler(snapshot)
        self.projector = FieldProjector(snapshot)

    def authorize(
        self,
        identity: RequestIdentity | None,
        resource: str,
        operation: Operation,
    ) -> AuthorizationDecision:
        if identity is None or not identity.role:
            raise AuthenticationException()
        permission = self.evaluator.evaluate(identity.role, resource, operation)
        if not permission.allowed:
            reason = permission.reason.value if permission.reason else None
            logger.info(
                "Denied %s on %s for role %s (%s)",
                operation.value,
                resource,
                identity.role,
                reason,
            )
            raise AuthorizationException(
                resource=resource, action=operation.value, reason=reason
            )
        return AuthorizationDecision(
            resource=resource,
            operation=operation,
            operation_allowed=True,
            row_predicate=self.compiler.compile(identity.role, resource, identity),
            readable_fields=self.projector.readable_fields(identity.role, resource),
            writable_fields=self.projector.writable_fields(identity.role, resource),
        )

    def project_read(self, identity: RequestIdentity, resource: str, rows: Any) -> Any:
        return self.projector.project_read(identity.role, resource, rows)

    def project_write(
        self,
        identity: RequestIdentity,
        resource: str,
        payload: Mapping[str, Any],
        current: Mapping[str, Any] | None = None,
    ) -> WriteProjection:
        return self.projector.project_write(identity.role, resource, payload, current)

    def check_write(self, resource: str, projection: WriteProjection) -> None:
        """Reject the whole write when an immutable field changes or a value is too long."""
        if projection.immutable_violations:
            raise ImmutableFieldException(resource, list(projection.immutable_violations))
        if projection.length_violations:
            raise ValidationException(
                "Value exceeds maximum length",
                fields=list(projection.length_violations),
            )

    def check_protected(
        self,
        resource: str,
        row: Mapping[str, Any],
        operation: Operation,
        accepted: Mapping[str, Any] | None = None,
    ) -> None:
        """Refuse to delete a system-protected record or change its key fields."""
        policy = self.snapshot.resource(resource)
        if policy is None or policy.protected is None:
            return
        protected = policy.protected
        if not protected.protects(row):
            return
        if operation is Operation.DELETE and protected.prevent_delete:
            raise AuthorizationException(
                resource=resource,
                action=operation.value,
                reason=DenyReason.PROTECTED_RECORD.value,
                message="System record cannot be deleted",
            )
        if operation is Operation.UPDATE and accepted:
            touched = sorted(k for k in accepted if k in protected.fields)
            if touched:
                raise AuthorizationException(
                    resource=resource,
                    action=operation.value,
                    reason=DenyReason.PROTECTED_RECORD.value,
                    message=f"Cannot modify protected field(s) of a system record: {', '.join(touched)}",
                )
