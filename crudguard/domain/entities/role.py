"""Role and role registry: the total order of seniority used by every check."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from types import MappingProxyType

from crudguard.domain.exceptions import ConfigurationException, RoleNotFoundException


def normalize_role_name(name: str) -> str:
    """Role names are case-insensitive; store and compare them lowercased."""
    return name.strip().lower()


@dataclass(frozen=True)
class Role:
    """A named role with an integer priority (higher = more senior)."""

    name: str
    priority: int
    description: str = ""


class RoleRegistry:
    """Immutable lookup table of roles ordered by priority.

    All "at least" comparisons go through priorities, never through names or
    list positions, so a role can be inserted between two existing ones
    without touching any call site.

    Raises ConfigurationException at construction when the role list is empty,
    or when names or priorities are duplicated or a priority is not positive.
    """

    __slots__ = ("_by_name", "_ordered")

    def __init__(self, roles: Iterable[Role]) -> None:
        ordered = sorted(roles, key=lambda r: r.priority)
        if not ordered:
            raise ConfigurationException("At least one role must be defined", "roles")
        by_name: dict[str, Role] = {}
        seen_priorities: set[int] = set()
        for role in ordered:
            name = normalize_role_name(role.name)
            if not name:
                raise ConfigurationException("Role name must be non-empty", "roles")
            if name in by_name:
                raise ConfigurationException(f"Duplicate role name '{name}'", "roles")
            if role.priority < 1:
                raise ConfigurationException(
                    f"Invalid priority {role.priority} for role '{name}' (must be >= 1)",
                    "roles",
                )
            if role.priority in seen_priorities:
                raise ConfigurationException(
                    f"Duplicate priority {role.priority} - each role must have a unique priority",
                    "roles",
                )
            seen_priorities.add(role.priority)
            by_name[name] = Role(name=name, priority=role.priority, description=role.description)
        self._by_name = MappingProxyType(by_name)
        self._ordered = tuple(by_name.values())

    def get(self, role: str | None) -> Role | None:
        """Return the role, or None when unknown."""
        if not role:
            return None
        return self._by_name.get(normalize_role_name(role))

    def priority_of(self, role: str) -> int:
        """Return the role's priority. Raises RoleNotFoundException when unknown."""
        found = self.get(role)
        if found is None:
            raise RoleNotFoundException(role)
        return found.priority

    def meets_priority(self, role: str | None, minimum_priority: int) -> bool:
        """True when the role exists and its priority is >= minimum_priority (inclusive)."""
        found = self.get(role)
        return found is not None and found.priority >= minimum_priority

    def is_at_least(self, role: str | None, minimum_role: str | None) -> bool:
        """True when both roles exist and role is at least as senior as minimum_role."""
        minimum = self.get(minimum_role)
        if minimum is None:
            return False
        return self.meets_priority(role, minimum.priority)

    def names(self) -> tuple[str, ...]:
        """Role names from least to most senior."""
        return tuple(r.name for r in self._ordered)

    def __contains__(self, role: object) -> bool:
        return isinstance(role, str) and self.get(role) is not None

    def __iter__(self) -> Iterator[Role]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)
