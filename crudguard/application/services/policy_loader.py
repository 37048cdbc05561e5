"""Loads the declarative access policy document into an immutable PolicySnapshot.

Structural validation uses the JSON Schema shipped in crudguard.policy; the
semantic rules (role references, priorities, RLS coverage, field references)
are checked here. Every failure raises ConfigurationException so the process
refuses to start with an inconsistent policy.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any

import jsonschema

from crudguard.domain.entities.resource_policy import (
    OperationRule,
    PolicySnapshot,
    ProtectedRecords,
    ResourcePolicy,
)
from crudguard.domain.entities.role import Role, RoleRegistry
from crudguard.domain.enums import Operation, RowPolicy
from crudguard.domain.exceptions import ConfigurationException
from crudguard.domain.value_objects.field_access import (
    FieldAccess,
    FieldAccessLevel,
    RoleAccess,
    parse_access_level,
)

logger = logging.getLogger(__name__)

POLICY_PACKAGE = "crudguard.policy"
SCHEMA_FILE = "policy.schema.json"
DEFAULT_POLICY_FILE = "default_policy.json"


@lru_cache
def _policy_schema() -> dict[str, Any]:
    text = resources.files(POLICY_PACKAGE).joinpath(SCHEMA_FILE).read_text(encoding="utf-8")
    return json.loads(text)


def read_policy_document(path: str | Path | None = None) -> tuple[dict[str, Any], str]:
    """Read the raw JSON document. None means the bundled default policy.

    Returns (document, source) where source is a printable origin for logs.
    """
    try:
        if path is None:
            source = f"{POLICY_PACKAGE}/{DEFAULT_POLICY_FILE}"
            text = (
                resources.files(POLICY_PACKAGE)
                .joinpath(DEFAULT_POLICY_FILE)
                .read_text(encoding="utf-8")
            )
        else:
            source = str(path)
            text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationException(f"Cannot read policy document: {e}") from e
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationException(
            f"Policy document is not valid JSON: {e.msg} (line {e.lineno})"
        ) from e
    return document, source


def load_policy(path: str | Path | None = None) -> PolicySnapshot:
    """Read, validate and build the policy snapshot from a file (or the bundled default)."""
    document, source = read_policy_document(path)
    snapshot = build_policy(document, source=source)
    logger.info(
        "Policy loaded from %s: %d roles, %d resources",
        source,
        len(snapshot.roles),
        len(snapshot.resources),
    )
    return snapshot


def build_policy(document: dict[str, Any], source: str | None = None) -> PolicySnapshot:
    """Validate a parsed policy document and build the snapshot.

    Raises:
        ConfigurationException: on any structural or semantic violation.
    """
    _validate_structure(document)
    roles = RoleRegistry(
        Role(
            name=r["name"],
            priority=r["priority"],
            description=r.get("description", ""),
        )
        for r in document["roles"]
    )
    universal = _parse_field_table(
        document.get("universalFields", {}), roles, "universalFields"
    )
    resources_: dict[str, ResourcePolicy] = {}
    for name, raw in document["resources"].items():
        resources_[name] = _build_resource(name, raw, roles, universal)
    return PolicySnapshot(
        roles=roles,
        resources=MappingProxyType(resources_),
        source=source,
    )


def _validate_structure(document: Any) -> None:
    try:
        jsonschema.validate(
            instance=document,
            schema=_policy_schema(),
            cls=jsonschema.Draft202012Validator,
        )
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or None
        raise ConfigurationException(
            f"Policy document is invalid: {e.message}", location
        ) from e


def _build_resource(
    name: str,
    raw: dict[str, Any],
    roles: RoleRegistry,
    universal: dict[str, FieldAccess],
) -> ResourcePolicy:
    path = f"resources/{name}"
    operations = {
        op: _parse_rule(raw["operations"][op.value], roles, f"{path}/operations/{op.value}")
        for op in Operation
    }

    fields: dict[str, FieldAccess] | None = None
    if "fields" in raw:
        fields = dict(universal)
        fields.update(_parse_field_table(raw["fields"], roles, f"{path}/fields"))

    row_scope = {
        RowPolicy(policy_id): column for policy_id, column in raw.get("rowScope", {}).items()
    }
    row_level_security = None
    if "rowLevelSecurity" in raw:
        row_level_security = _parse_rls(
            raw["rowLevelSecurity"], row_scope, roles, f"{path}/rowLevelSecurity"
        )

    immutable = frozenset(raw.get("immutableFields", ()))
    required = frozenset(raw.get("requiredFields", ()))
    sortable = frozenset(raw.get("sortableFields", ()))
    searchable = frozenset(raw.get("searchableFields", ()))
    protected = None
    if "protectedRecords" in raw:
        pr = raw["protectedRecords"]
        protected = ProtectedRecords(
            field=pr["field"],
            values=frozenset(pr["values"]),
            fields=frozenset(pr.get("fields", ())),
            prevent_delete=pr.get("preventDelete", True),
        )

    if fields is not None:
        for key, names in (
            ("immutableFields", immutable),
            ("requiredFields", required),
            ("sortableFields", sortable),
            ("searchableFields", searchable),
        ):
            _require_declared(names, fields, f"{path}/{key}")
        if protected is not None:
            _require_declared(
                protected.fields | {protected.field}, fields, f"{path}/protectedRecords"
            )

    return ResourcePolicy(
        name=name,
        table=raw.get("table", name),
        primary_key=raw.get("primaryKey", "id"),
        operations=MappingProxyType(operations),
        row_level_security=row_level_security,
        row_scope=MappingProxyType(row_scope),
        fields=MappingProxyType(fields) if fields is not None else None,
        immutable_fields=immutable,
        required_fields=required,
        sortable_fields=sortable,
        searchable_fields=searchable,
        protected=protected,
        description=raw.get("description", ""),
        virtual=raw.get("virtual", False),
    )


def _parse_rule(raw: dict[str, Any], roles: RoleRegistry, path: str) -> OperationRule:
    disabled = raw.get("disabled", False)
    minimum_role = raw["minimumRole"]
    minimum_priority = raw["minimumPriority"]
    if disabled:
        if minimum_role is not None:
            raise ConfigurationException(
                "A disabled operation must have minimumRole null", path
            )
        if minimum_priority != 0:
            raise ConfigurationException(
                "A disabled operation must have minimumPriority 0", path
            )
        return OperationRule(minimum_role=None, minimum_priority=0, disabled=True)
    if minimum_role is None:
        raise ConfigurationException(
            "minimumRole null is only valid when the operation is disabled", path
        )
    role = roles.get(minimum_role)
    if role is None:
        raise ConfigurationException(f"Unknown minimumRole '{minimum_role}'", path)
    if role.priority != minimum_priority:
        raise ConfigurationException(
            f"minimumPriority {minimum_priority} does not match priority "
            f"{role.priority} of role '{role.name}'",
            path,
        )
    return OperationRule(minimum_role=role.name, minimum_priority=role.priority)


def _parse_field_table(
    raw: dict[str, Any], roles: RoleRegistry, path: str
) -> dict[str, FieldAccess]:
    table: dict[str, FieldAccess] = {}
    for field_name, entry in raw.items():
        table[field_name] = FieldAccess(
            read=_parse_level(entry["read"], roles, f"{path}/{field_name}/read"),
            write=_parse_level(entry["write"], roles, f"{path}/{field_name}/write"),
            max_length=entry.get("maxLength"),
        )
    return table


def _parse_level(raw: str, roles: RoleRegistry, path: str) -> FieldAccessLevel:
    level = parse_access_level(raw)
    if isinstance(level, RoleAccess) and level.role not in roles:
        raise ConfigurationException(f"Unknown role '{raw}' in field access", path)
    return level


def _parse_rls(
    raw: dict[str, str],
    row_scope: dict[RowPolicy, str],
    roles: RoleRegistry,
    path: str,
) -> MappingProxyType[str, str]:
    rls: dict[str, str] = {}
    for role_name, policy_id in raw.items():
        role = roles.get(role_name)
        if role is None:
            raise ConfigurationException(
                f"Unknown role '{role_name}' in rowLevelSecurity", path
            )
        if role.name in rls:
            raise ConfigurationException(
                f"Duplicate rowLevelSecurity entry for role '{role.name}'", path
            )
        rls[role.name] = policy_id
        if policy_id not in RowPolicy.values():
            # Kept as-is; the row filter compiler fails closed on it per request.
            logger.warning(
                "Unknown row policy '%s' for role '%s' at %s", policy_id, role.name, path
            )
            continue
        policy = RowPolicy(policy_id)
        if policy.binds_column and policy not in row_scope:
            raise ConfigurationException(
                f"Row policy '{policy_id}' needs a rowScope column binding", path
            )
    missing = [name for name in roles.names() if name not in rls]
    if missing:
        raise ConfigurationException(
            f"rowLevelSecurity has no entry for role(s): {', '.join(missing)}", path
        )
    return MappingProxyType(rls)


def _require_declared(names: frozenset[str], fields: dict[str, FieldAccess], path: str) -> None:
    undeclared = sorted(n for n in names if n not in fields)
    if undeclared:
        raise ConfigurationException(
            f"Undeclared field(s): {', '.join(undeclared)}", path
        )


__all__ = [
    "build_policy",
    "load_policy",
    "read_policy_document",
]
