"""DTO for the caller identity resolved upstream (token) and handed to the engine."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


def _empty_ids() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True)
class RequestIdentity:
    """Per-request caller identity. Never persisted, never cached across requests.

    owned_entity_ids maps a resource name to the id that "own" and "assigned"
    row policies compare against (e.g. {"work_orders": 7} for a customer whose
    customer id is 7).
    """

    user_id: str
    role: str
    owned_entity_ids: Mapping[str, Any] = field(default_factory=_empty_ids)

    def owned_id(self, resource: str) -> Any | None:
        return self.owned_entity_ids.get(resource)
