"""Application layer: DTOs, interfaces, services, use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (entity store, audit hook).
"""

from crudguard.application.interfaces import IAuditHook, IEntityStore
from crudguard.application.services import (
    FieldProjector,
    PermissionEvaluator,
    RequestAuthorizer,
    RowFilterCompiler,
    build_policy,
    load_policy,
)
from crudguard.application.use_cases import EntityService

__all__ = [
    "EntityService",
    "FieldProjector",
    "IAuditHook",
    "IEntityStore",
    "PermissionEvaluator",
    "RequestAuthorizer",
    "RowFilterCompiler",
    "build_policy",
    "load_policy",
]
