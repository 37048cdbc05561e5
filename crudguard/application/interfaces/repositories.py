"""Repository interfaces (ports) for the application layer.

Storage receives the engine's predicate as an opaque value and must AND it
with every caller-supplied filter; it is never optional.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from crudguard.application.dtos.entity import ListQuery
    from crudguard.domain.entities.resource_policy import ResourcePolicy
    from crudguard.domain.value_objects.predicate import Predicate


class IEntityStore(Protocol):
    """Protocol for generic row storage keyed by resource policy (DIP)."""

    async def list(
        self, policy: ResourcePolicy, predicate: Predicate, query: ListQuery
    ) -> list[dict[str, Any]]:
        """Return rows matching predicate AND query filters, paginated and sorted."""

    async def get(
        self, policy: ResourcePolicy, entity_id: str, predicate: Predicate
    ) -> dict[str, Any] | None:
        """Return the row with this id if it also matches predicate, else None."""

    async def create(
        self, policy: ResourcePolicy, values: dict[str, Any]
    ) -> dict[str, Any]:
        """Insert a row and return it as stored. Raises ConflictException on constraint errors."""

    async def update(
        self,
        policy: ResourcePolicy,
        entity_id: str,
        values: dict[str, Any],
        predicate: Predicate,
    ) -> dict[str, Any] | None:
        """Update the row if it matches predicate; return the stored row or None."""

    async def delete(
        self, policy: ResourcePolicy, entity_id: str, predicate: Predicate
    ) -> bool:
        """Delete the row if it matches predicate; return whether a row was deleted."""
