"""DTOs for the generic entity use cases."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ListQuery:
    """Caller-controlled list parameters. Always ANDed with the row predicate.

    search is matched case-insensitively as a substring of any of
    search_fields; the use case narrows search_fields to the searchable
    fields the caller can read.
    """

    skip: int = 0
    limit: int = 50
    filters: dict[str, Any] = field(default_factory=dict)
    sort: str | None = None
    descending: bool = False
    search: str | None = None
    search_fields: tuple[str, ...] = ()


@dataclass(frozen=True)
class EntityPage:
    """One page of projected rows."""

    items: list[dict[str, Any]]
    skip: int
    limit: int
