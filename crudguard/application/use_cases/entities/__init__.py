"""Entity use cases."""

from crudguard.application.use_cases.entities.entity_operations import EntityService

__all__ = ["EntityService"]
