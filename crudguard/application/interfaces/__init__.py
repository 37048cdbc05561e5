"""Application ports (Protocols) implemented by infrastructure."""

from crudguard.application.interfaces.repositories import IEntityStore
from crudguard.application.interfaces.services import IAuditHook

__all__ = ["IAuditHook", "IEntityStore"]
