"""Permission evaluator: may this role perform this operation on this resource at all?"""

from __future__ import annotations

from crudguard.application.dtos.authorization import PermissionDecision
from crudguard.domain.entities.resource_policy import PolicySnapshot
from crudguard.domain.enums import DenyReason, Operation


class PermissionEvaluator:
    """Default-deny operation check against the loaded policy snapshot.

    Pure and synchronous: no I/O and no caching across calls, so a role change
    takes effect on the next request.
    """

    def __init__(self, snapshot: PolicySnapshot) -> None:
        self.snapshot = snapshot

    def evaluate(
        self, role: str | None, resource: str, operation: Operation | str
    ) -> PermissionDecision:
        """Return Allow, or Deny with the first failing reason.

        Unknown resource, operation or role deny; nothing is implicitly permitted.
        A role exactly at the minimum priority is allowed.
        """
        policy = self.snapshot.resource(resource)
        if policy is None:
            return PermissionDecision.deny(DenyReason.UNKNOWN_RESOURCE)
        try:
            op = Operation(operation)
        except ValueError:
            return PermissionDecision.deny(DenyReason.UNKNOWN_OPERATION)
        rule = policy.rule_for(op)
        if rule is None:
            return PermissionDecision.deny(DenyReason.UNKNOWN_OPERATION)
        if rule.disabled:
            return PermissionDecision.deny(DenyReason.OPERATION_DISABLED)
        if self.snapshot.roles.get(role) is None:
            return PermissionDecision.deny(DenyReason.UNKNOWN_ROLE)
        if not self.snapshot.roles.meets_priority(role, rule.minimum_priority):
            return PermissionDecision.deny(DenyReason.BELOW_MINIMUM_ROLE)
        return PermissionDecision.allow()

    def is_allowed(self, role: str | None, resource: str, operation: Operation | str) -> bool:
        return self.evaluate(role, resource, operation).allowed

    def allowed_operations(self, role: str | None, resource: str) -> list[Operation]:
        """Operations the role may perform on the resource, in CRUD order."""
        return [op for op in Operation if self.is_allowed(role, resource, op)]
