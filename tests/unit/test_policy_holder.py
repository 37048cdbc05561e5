"""Tests for PolicyHolder: atomic swap on reload, previous policy kept on failure."""

import json
from pathlib import Path
from typing import Any

import pytest

from crudguard.core.policy_holder import PolicyHolder
from crudguard.domain.enums import Operation
from crudguard.domain.exceptions import ConfigurationException


def _write(path: Path, document: dict[str, Any]) -> None:
    path.write_text(json.dumps(document), encoding="utf-8")


async def test_reload_publishes_new_snapshot(
    tmp_path: Path, policy_document: dict[str, Any]
) -> None:
    path = tmp_path / "policy.json"
    _write(path, policy_document)
    holder = PolicyHolder.from_path(path)
    before = holder.current()

    policy_document["resources"]["inventory"]["operations"]["read"] = {
        "minimumRole": "customer",
        "minimumPriority": 10,
    }
    _write(path, policy_document)
    after = await holder.reload()

    assert holder.current() is after
    assert after is not before
    assert before.resource("inventory").rule_for(Operation.READ).minimum_role == "technician"
    assert after.resource("inventory").rule_for(Operation.READ).minimum_role == "customer"


async def test_failed_reload_keeps_previous_snapshot(
    tmp_path: Path, policy_document: dict[str, Any]
) -> None:
    path = tmp_path / "policy.json"
    _write(path, policy_document)
    holder = PolicyHolder.from_path(path)
    before = holder.current()

    policy_document["roles"][1]["priority"] = 10
    _write(path, policy_document)
    with pytest.raises(ConfigurationException):
        await holder.reload()

    assert holder.current() is before


def test_from_path_rejects_invalid_policy(tmp_path: Path) -> None:
    path = tmp_path / "policy.json"
    path.write_text('{"roles": []}', encoding="utf-8")
    with pytest.raises(ConfigurationException):
        PolicyHolder.from_path(path)


def test_default_policy_when_no_path() -> None:
    holder = PolicyHolder.from_path()
    assert "work_orders" in holder.current().resources
