"""Row filter compiler: turns a role's row-level security policy into a Predicate.

The compiler only decides which predicate applies; storage adapters translate
it. Misconfiguration never raises here: it compiles to MatchNone and logs.
"""

from __future__ import annotations

import logging

from crudguard.application.dtos.identity import RequestIdentity
from crudguard.domain.entities.resource_policy import PolicySnapshot, ResourcePolicy
from crudguard.domain.enums import RowPolicy
from crudguard.domain.value_objects.predicate import (
    ColumnEquals,
    MatchAll,
    MatchNone,
    Predicate,
)

logger = logging.getLogger(__name__)


class RowFilterCompiler:
    """Compiles (role, resource, identity) into the row predicate for one request."""

    def __init__(self, snapshot: PolicySnapshot) -> None:
        self.snapshot = snapshot

    def compile(self, role: str, resource: str, identity: RequestIdentity) -> Predicate:
        policy = self.snapshot.resource(resource)
        if policy is None:
            return MatchNone()
        if not policy.has_row_level_security:
            return MatchAll()

        policy_id = policy.row_policy_for(role)
        if policy_id is None:
            logger.warning(
                "No row policy for role '%s' on resource '%s'; no rows visible",
                role,
                resource,
            )
            return MatchNone()
        try:
            row_policy = RowPolicy(policy_id)
        except ValueError:
            logger.warning(
                "Unknown row policy '%s' for role '%s' on resource '%s'; no rows visible",
                policy_id,
                role,
                resource,
            )
            return MatchNone()
        return self._resolve(row_policy, policy, identity)

    def _resolve(
        self, row_policy: RowPolicy, policy: ResourcePolicy, identity: RequestIdentity
    ) -> Predicate:
        if row_policy in (RowPolicy.ALL_RECORDS, RowPolicy.PUBLIC_RESOURCE):
            return MatchAll()
        if row_policy is RowPolicy.DENY_ALL:
            return MatchNone()

        column = policy.row_scope.get(row_policy)
        if column is None:
            logger.warning(
                "Row policy '%s' on resource '%s' has no column binding; no rows visible",
                row_policy.value,
                policy.name,
            )
            return MatchNone()
        owned_id = identity.owned_id(policy.name)
        if owned_id is None:
            # Identity owns nothing here: match nothing, never everything.
            return MatchNone()
        return ColumnEquals(column=column, value=owned_id)
