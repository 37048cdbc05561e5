"""Field projector: strips unreadable fields from rows and filters inbound payloads.

project_read is applied to every row leaving storage; there is no opt-out.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, overload

from crudguard.application.dtos.authorization import WriteProjection
from crudguard.domain.entities.resource_policy import PolicySnapshot
from crudguard.domain.value_objects.field_access import FieldAccessLevel, RoleAccess


def values_equal(submitted: Any, stored: Any) -> bool:
    """True when a submitted value is the same as the stored one.

    Payloads arrive as JSON, so a stored datetime is compared against its ISO
    form and other scalars fall back to string form.
    """
    if submitted == stored:
        return True
    if submitted is None or stored is None:
        return False
    if isinstance(stored, datetime) and isinstance(submitted, str):
        try:
            return datetime.fromisoformat(submitted) == stored
        except ValueError:
            return False
    if isinstance(stored, date) and isinstance(submitted, str):
        try:
            return date.fromisoformat(submitted) == stored
        except ValueError:
            return False
    if isinstance(submitted, (dict, list)) or isinstance(stored, (dict, list)):
        return False
    return str(submitted) == str(stored)


class FieldProjector:
    """Read/write field sets per role, computed from the snapshot's field tables.

    A resource without a field table is not field-restricted (the field sets
    are None). With a table, undeclared fields are hidden and not writable.
    An unknown resource exposes nothing.
    """

    def __init__(self, snapshot: PolicySnapshot) -> None:
        self.snapshot = snapshot

    def _meets(self, role: str, level: FieldAccessLevel) -> bool:
        # SystemAccess and NoAccess admit no role.
        return isinstance(level, RoleAccess) and self.snapshot.roles.is_at_least(
            role, level.role
        )

    def readable_fields(self, role: str, resource: str) -> frozenset[str] | None:
        policy = self.snapshot.resource(resource)
        if policy is None:
            return frozenset()
        if policy.fields is None:
            return None
        return frozenset(
            name for name, access in policy.fields.items() if self._meets(role, access.read)
        )

    def writable_fields(self, role: str, resource: str) -> frozenset[str] | None:
        policy = self.snapshot.resource(resource)
        if policy is None:
            return frozenset()
        if policy.fields is None:
            return None
        return frozenset(
            name for name, access in policy.fields.items() if self._meets(role, access.write)
        )

    @overload
    def project_read(
        self, role: str, resource: str, rows: Mapping[str, Any]
    ) -> dict[str, Any]: ...

    @overload
    def project_read(
        self, role: str, resource: str, rows: list[Mapping[str, Any]]
    ) -> list[dict[str, Any]]: ...

    def project_read(self, role, resource, rows):
        """Strip every field the role may not read from one row or a list of rows.

        Idempotent: projecting an already projected row returns it unchanged.
        """
        readable = self.readable_fields(role, resource)
        if isinstance(rows, Mapping):
            return self._strip(rows, readable)
        return [self._strip(row, readable) for row in rows]

    @staticmethod
    def _strip(row: Mapping[str, Any], readable: frozenset[str] | None) -> dict[str, Any]:
        if readable is None:
            return dict(row)
        return {k: v for k, v in row.items() if k in readable}

    def project_write(
        self,
        role: str,
        resource: str,
        payload: Mapping[str, Any],
        current: Mapping[str, Any] | None = None,
    ) -> WriteProjection:
        """Split a payload into accepted, rejected, unchanged and violating keys.

        current is the stored row for an update (None for create). Immutable
        keys resubmitted with their stored value are dropped as unchanged; a
        different value is an immutable violation even when the role could not
        write the field, so a changed value is never silently ignored. An
        immutable key the role cannot read is a violation whatever its value.
        """
        policy = self.snapshot.resource(resource)
        readable = self.readable_fields(role, resource)
        writable = self.writable_fields(role, resource)
        accepted: dict[str, Any] = {}
        rejected: list[str] = []
        unchanged: list[str] = []
        immutable: list[str] = []
        too_long: list[str] = []

        for key, value in payload.items():
            if current is not None and policy is not None and key in policy.immutable_fields:
                if (readable is None or key in readable) and values_equal(
                    value, current.get(key)
                ):
                    unchanged.append(key)
                else:
                    immutable.append(key)
                continue
            if writable is not None and key not in writable:
                rejected.append(key)
                continue
            access = policy.field_access(key) if policy is not None else None
            if (
                access is not None
                and access.max_length is not None
                and isinstance(value, str)
                and len(value) > access.max_length
            ):
                too_long.append(key)
                continue
            accepted[key] = value

        return WriteProjection(
            accepted=accepted,
            rejected=tuple(sorted(rejected)),
            unchanged=tuple(sorted(unchanged)),
            immutable_violations=tuple(sorted(immutable)),
            length_violations=tuple(sorted(too_long)),
        )
