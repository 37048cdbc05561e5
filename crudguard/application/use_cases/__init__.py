"""Application use cases."""

from crudguard.application.use_cases.entities import EntityService

__all__ = ["EntityService"]
