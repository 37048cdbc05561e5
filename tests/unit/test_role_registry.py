"""Tests for Role and RoleRegistry ordering and lookups."""

import pytest

from crudguard.domain.entities.role import Role, RoleRegistry
from crudguard.domain.exceptions import ConfigurationException, RoleNotFoundException


def _registry() -> RoleRegistry:
    return RoleRegistry(
        [
            Role("admin", 100),
            Role("customer", 10),
            Role("Manager", 80),
            Role("technician", 30),
        ]
    )


class TestRoleRegistryConstruction:
    def test_orders_by_priority(self) -> None:
        assert _registry().names() == ("customer", "technician", "manager", "admin")

    def test_names_are_lowercased(self) -> None:
        registry = _registry()
        assert "manager" in registry
        assert "MANAGER" in registry
        assert registry.get("Manager").name == "manager"

    def test_empty_raises(self) -> None:
        with pytest.raises(ConfigurationException):
            RoleRegistry([])

    def test_duplicate_priority_raises(self) -> None:
        with pytest.raises(ConfigurationException) as exc_info:
            RoleRegistry([Role("a", 10), Role("b", 10)])
        assert "Duplicate priority" in exc_info.value.message

    def test_duplicate_name_raises(self) -> None:
        with pytest.raises(ConfigurationException):
            RoleRegistry([Role("admin", 10), Role("ADMIN", 20)])

    def test_non_positive_priority_raises(self) -> None:
        with pytest.raises(ConfigurationException):
            RoleRegistry([Role("ghost", 0)])


class TestRoleRegistryComparisons:
    """All comparisons go through priority and are inclusive."""

    def test_priority_of(self) -> None:
        assert _registry().priority_of("technician") == 30

    def test_priority_of_unknown_raises(self) -> None:
        with pytest.raises(RoleNotFoundException):
            _registry().priority_of("auditor")

    def test_meets_priority_is_inclusive(self) -> None:
        registry = _registry()
        assert registry.meets_priority("manager", 80)
        assert not registry.meets_priority("technician", 80)

    def test_unknown_role_never_meets(self) -> None:
        registry = _registry()
        assert not registry.meets_priority("auditor", 0)
        assert not registry.meets_priority(None, 0)

    def test_is_at_least(self) -> None:
        registry = _registry()
        assert registry.is_at_least("admin", "manager")
        assert registry.is_at_least("manager", "manager")
        assert not registry.is_at_least("customer", "technician")
        assert not registry.is_at_least("admin", "auditor")

    def test_inserting_a_role_between_existing_ones(self) -> None:
        """A new role slots in by priority without changing other comparisons."""
        registry = RoleRegistry(
            [Role("customer", 10), Role("dispatcher", 50), Role("technician", 30)]
        )
        assert registry.names() == ("customer", "technician", "dispatcher")
        assert registry.is_at_least("dispatcher", "technician")
        assert not registry.is_at_least("technician", "dispatcher")

    def test_len_and_iter(self) -> None:
        registry = _registry()
        assert len(registry) == 4
        assert [r.priority for r in registry] == [10, 30, 80, 100]
