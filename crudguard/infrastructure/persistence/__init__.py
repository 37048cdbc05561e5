"""Persistence: async engine, sessions, audit log model, generic entity store."""

from crudguard.infrastructure.persistence.database import (
    Base,
    get_db,
    get_db_transactional,
)

__all__ = ["Base", "get_db", "get_db_transactional"]
