"""Repositories implementing the application storage ports."""

from crudguard.infrastructure.persistence.repositories.entity_store import (
    SqlEntityStore,
    TableCatalog,
)

__all__ = ["SqlEntityStore", "TableCatalog"]
